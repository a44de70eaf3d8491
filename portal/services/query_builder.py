# portal/services/query_builder.py

import uuid
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from portal.core.exceptions import BadRequestError

TEXT = "text"
IDENTIFIER = "identifier"

DEFAULT_SORT = "created_at DESC, id DESC"

# LIMIT/OFFSET are bound as bigint
MAX_OFFSET = 2 ** 63 - 1


@dataclass(frozen=True)
class FilterField:
    column: str
    kind: str = TEXT


@dataclass
class ListQuery:
    """A parameterized WHERE/ORDER BY pair plus the page window."""

    where: str
    args: List[Any] = field(default_factory=list)
    order_by: str = DEFAULT_SORT
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_identifier(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _positive_int(raw: Any, default: int, name: str) -> int:
    if raw is None or raw == "":
        return default
    try:
        number = int(raw)
    except (TypeError, ValueError):
        raise BadRequestError(f"{name} must be a whole number")
    return max(number, 1)


def build_list_query(
    filters: Mapping[str, Any],
    filterable: Mapping[str, FilterField],
    options: Optional[Mapping[str, Any]] = None,
    sortable: Optional[Mapping[str, str]] = None,
    default_limit: int = 10,
    max_limit: int = 100,
) -> ListQuery:
    """Translate whitelisted filters and paging options into SQL fragments.

    Keys missing from ``filterable`` are ignored. Text filters are
    case-insensitive substring matches; identifier filters match exactly
    and are dropped when the value is not a UUID. All conditions are ANDed.
    """
    options = options or {}
    sortable = sortable or {}

    clauses = []
    args: List[Any] = []
    for key, value in filters.items():
        spec = filterable.get(key)
        if spec is None or value is None or value == "":
            continue
        if spec.kind == IDENTIFIER:
            ident = parse_identifier(value)
            if ident is None:
                continue
            args.append(ident)
            clauses.append(f"{spec.column} = ${len(args)}")
        else:
            args.append(f"%{escape_like(str(value))}%")
            clauses.append(f"{spec.column} ILIKE ${len(args)}")

    page = _positive_int(options.get("page"), 1, "page")
    limit = min(_positive_int(options.get("limit"), default_limit, "limit"), max_limit)
    if (page - 1) * limit > MAX_OFFSET:
        raise BadRequestError("page is out of range")

    order_by = DEFAULT_SORT
    sort_by = options.get("sortBy")
    sort_order = options.get("sortOrder")
    if sort_by and sort_order and sort_by in sortable:
        direction = "ASC" if str(sort_order).lower() == "asc" else "DESC"
        order_by = f"{sortable[sort_by]} {direction}, id {direction}"

    return ListQuery(
        where=" AND ".join(clauses) or "TRUE",
        args=args,
        order_by=order_by,
        page=page,
        limit=limit,
    )
