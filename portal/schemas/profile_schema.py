from datetime import date, datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, StringConstraints, model_validator

from portal.schemas.common import BDPhone, partial_model

NID_YES = "1"
NID_NO = "0"


def _date_part(value: Any) -> Any:
    # clients often send a full ISO timestamp for the birth date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in "Tt ":
        return value[:10]
    return value


# lengths follow the profiles table columns
ProfileName = Annotated[str, StringConstraints(max_length=255)]
DocumentNumber = Annotated[str, StringConstraints(max_length=32)]
ShortChoice = Annotated[str, StringConstraints(max_length=32)]
Choice = Annotated[str, StringConstraints(max_length=64)]
BirthDate = Annotated[date, BeforeValidator(_date_part)]


def check_nid_requirement(nid: Optional[str], nid_no: Optional[str]) -> None:
    """The national-ID number is mandatory only when the NID flag is set."""
    if nid == NID_YES and not (nid_no and nid_no.strip()):
        raise ValueError("NID number is required when NID is 1")


class PresentAddress(BaseModel):
    careof: str
    village: str
    district: str
    upazila: str
    post: str
    postcode: str


class ExamRecord(BaseModel):
    """One board examination (SSC or HSC)."""

    exam: str
    roll: str
    group: str
    group_other: Optional[str] = None
    board: str
    board_other: Optional[str] = None
    result_type: str
    result: float = Field(..., ge=0)
    year: str


class ProfileCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    name: ProfileName
    name_bn: ProfileName
    father: ProfileName
    father_bn: ProfileName
    mother: ProfileName
    mother_bn: ProfileName
    dob: BirthDate
    gender: ShortChoice

    nid: str = Field(..., pattern=r"^[01]$")
    nid_no: Optional[DocumentNumber] = None
    breg: Optional[DocumentNumber] = None
    passport: Optional[DocumentNumber] = None

    email: EmailStr
    mobile: BDPhone
    confirm_mobile: BDPhone

    nationality: Choice
    religion: Choice
    marital_status: ShortChoice
    quota: Choice
    dep_status: Optional[Choice] = None

    present_address: PresentAddress
    ssc: ExamRecord
    hsc: ExamRecord

    @model_validator(mode="after")
    def nid_number_when_flagged(self):
        check_nid_requirement(self.nid, self.nid_no)
        return self


# owner is fixed at creation
ProfileUpdate = partial_model(ProfileCreate, "ProfileUpdate", exclude=("user_id",))

PROFILE_IMMUTABLE_FIELDS = ("userId", "user_id")


class ProfileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    user_id: UUID = Field(..., alias="userId")
    name: str
    name_bn: str
    father: str
    father_bn: str
    mother: str
    mother_bn: str
    dob: date
    gender: str
    nid: str
    nid_no: Optional[str] = None
    breg: Optional[str] = None
    passport: Optional[str] = None
    email: str
    mobile: str
    confirm_mobile: str
    nationality: str
    religion: str
    marital_status: str
    quota: str
    dep_status: Optional[str] = None
    present_address: PresentAddress
    ssc: ExamRecord
    hsc: ExamRecord
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
