from pydantic import BaseModel, ConfigDict, EmailStr, Field

from portal.schemas.account_schema import AccountOut
from portal.schemas.common import PersonName, StrongPassword


class SignupIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: PersonName = Field(..., alias="firstName")
    last_name: PersonName = Field(..., alias="lastName")
    email: EmailStr
    password: StrongPassword


class LoginIn(BaseModel):
    email: EmailStr
    # strength is only enforced at signup
    password: str = Field(..., min_length=8)


class RefreshIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., min_length=1, alias="refreshToken")


class LoginOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: AccountOut
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    token_type: str = Field("bearer", alias="tokenType")
