import enum
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from portal.schemas.common import BDPhone, PersonName, partial_model

AvatarUrl = Annotated[str, StringConstraints(max_length=1024)]


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SELLER = "SELLER"


class AccountBase(BaseModel):
    """Every writable account attribute, as accepted from clients."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    first_name: PersonName = Field(..., alias="firstName")
    last_name: PersonName = Field(..., alias="lastName")
    email: EmailStr
    phone: Optional[BDPhone] = None
    role: Role = Role.USER
    avatar: Optional[AvatarUrl] = None
    otp: Optional[int] = None
    password: str = Field(..., min_length=8)


# email and password are fixed after signup; otp is set by the server only
AccountUpdate = partial_model(AccountBase, "AccountUpdate", exclude=("email", "password", "otp"))


class AccountOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    phone: Optional[str] = None
    role: Role
    avatar: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
