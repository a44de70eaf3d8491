from sqlalchemy import Column, Date, DateTime, ForeignKey, String, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from portal.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    name_bn = Column(String(255), nullable=False)
    father = Column(String(255), nullable=False)
    father_bn = Column(String(255), nullable=False)
    mother = Column(String(255), nullable=False)
    mother_bn = Column(String(255), nullable=False)
    dob = Column(Date, nullable=False)
    gender = Column(String(32), nullable=False)

    nid = Column(String(1), nullable=False, doc="1 = has NID, 0 = uses birth registration")
    nid_no = Column(String(32), nullable=True)
    breg = Column(String(32), nullable=True)
    passport = Column(String(32), nullable=True)

    email = Column(String(320), nullable=False)
    mobile = Column(String(20), nullable=False)
    confirm_mobile = Column(String(20), nullable=False)

    nationality = Column(String(64), nullable=False)
    religion = Column(String(64), nullable=False)
    marital_status = Column(String(32), nullable=False)
    quota = Column(String(64), nullable=False)
    dep_status = Column(String(64), nullable=True)

    present_address = Column(JSONB, nullable=False)
    ssc = Column(JSONB, nullable=False)
    hsc = Column(JSONB, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("Account", back_populates="profiles")

    def __repr__(self):
        return f"<Profile(name={self.name}, user_id={self.user_id})>"
