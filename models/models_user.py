import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from db import Base


def utcnow() -> datetime:
    # naive UTC, matching the DateTime(timezone=False) columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    school_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=utcnow, onupdate=utcnow, nullable=False)

    verifications = relationship(
        "EmailVerification", back_populates="user", cascade="all, delete-orphan"
    )
    password_resets = relationship(
        "PasswordReset", back_populates="user", cascade="all, delete-orphan"
    )


class EmailVerification(Base):
    __tablename__ = "email_verifications"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    code = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=False), nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), default=utcnow, nullable=False)

    user = relationship("User", back_populates="verifications")

    @classmethod
    def issue(cls, user: User, code: str, minutes_valid: int) -> "EmailVerification":
        return cls(user=user, code=code, expires_at=utcnow() + timedelta(minutes=minutes_valid), is_used=False)


class PasswordReset(Base):
    __tablename__ = "password_resets"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(128), index=True, nullable=False)
    expires_at = Column(DateTime(timezone=False), nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), default=utcnow, nullable=False)

    user = relationship("User", back_populates="password_resets")

    @classmethod
    def issue(cls, user: User, token: str, minutes_valid: int) -> "PasswordReset":
        return cls(user=user, token=token, expires_at=utcnow() + timedelta(minutes=minutes_valid), is_used=False)
