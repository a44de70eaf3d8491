import re
from collections.abc import Mapping
from typing import Annotated, Any, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ValidationError, create_model

from portal.core.exceptions import BadRequestError
from portal.utils.normalize import is_valid_phone

ModelT = TypeVar("ModelT", bound=BaseModel)
ItemT = TypeVar("ItemT")


def _check_phone(value: str) -> str:
    if not is_valid_phone(value):
        raise ValueError(f"{value} is not a valid Bangladeshi mobile number")
    return value


def _check_password_policy(value: str) -> str:
    problems = []
    if len(value) < 8:
        problems.append("Password must be at least 8 characters long.")
    if len(value) > 64:
        problems.append("Password must not exceed 64 characters.")
    if not re.search(r"[A-Z]", value):
        problems.append("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", value):
        problems.append("Password must contain at least one lowercase letter.")
    if not re.search(r"[0-9]", value):
        problems.append("Password must contain at least one number.")
    if not re.search(r"[^A-Za-z0-9]", value):
        problems.append("Password must contain at least one special character.")
    if problems:
        raise ValueError(", ".join(problems))
    return value


BDPhone = Annotated[str, AfterValidator(_check_phone)]
StrongPassword = Annotated[str, AfterValidator(_check_password_policy)]
PersonName = Annotated[str, Field(min_length=2, max_length=150)]


# ------------------ Error reporting ------------------ #

def error_messages(exc) -> List[str]:
    """Flatten a pydantic or FastAPI request ``ValidationError`` into messages."""
    messages = []
    for err in exc.errors():
        label = ".".join(str(part) for part in err["loc"]) or "body"
        if err["type"] == "missing":
            messages.append(f"{label} is required.")
        elif err["type"] == "value_error" and "error" in err.get("ctx", {}):
            messages.append(str(err["ctx"]["error"]))
        else:
            messages.append(f"{label}: {err['msg']}")
    return messages


def validate_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate ``payload`` against ``model`` reporting every violation at once."""
    if not isinstance(payload, Mapping):
        raise BadRequestError("Request body must be a JSON object.")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise BadRequestError(", ".join(error_messages(exc)))


# ------------------ Schema derivation ------------------ #

def partial_model(model: Type[BaseModel], name: str, exclude: Iterable[str] = ()) -> Type[BaseModel]:
    """Build an update schema from ``model``.

    Fields named in ``exclude`` are dropped; every other field becomes
    optional with a ``None`` default. Field-level constraints and
    validators travel with the field, model-level validators do not.
    """
    excluded = set(exclude)
    fields = {}
    for field_name, info in model.model_fields.items():
        if field_name in excluded:
            continue
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[field_name] = (
            Optional[annotation],
            Field(default=None, alias=info.alias, description=info.description),
        )
    return create_model(name, __config__=model.model_config, **fields)


# ------------------ Pagination ------------------ #

class PageMeta(BaseModel):
    total: int
    page: int
    limit: int


class Page(BaseModel, Generic[ItemT]):
    meta: PageMeta
    data: List[ItemT]


class MessageOut(BaseModel):
    message: str
