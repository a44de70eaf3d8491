import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from portal.db.base import Base


class AccountRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SELLER = "SELLER"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    first_name = Column(String(150), nullable=False, index=True)
    last_name = Column(String(150), nullable=False, index=True)
    email = Column(String(320), unique=True, nullable=False)
    phone = Column(String(20), unique=True, nullable=True)
    role = Column(
        Enum(AccountRole, name="accountrole", create_type=True, values_callable=lambda e: [m.value for m in e]),
        default=AccountRole.USER,
        server_default=AccountRole.USER.value,
        nullable=False,
    )
    avatar = Column(String(1024), nullable=True)
    otp = Column(Integer, nullable=True)
    password = Column(String(255), nullable=False)
    refresh_token = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profiles = relationship("Profile", back_populates="owner", passive_deletes=True)

    def __repr__(self):
        return f"<Account(email={self.email}, role={self.role})>"
