from sqlalchemy.orm import Session
from sqlalchemy import select
from models.models_user import User, EmailVerification, PasswordReset, utcnow

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()

def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)

def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.created_at)).scalars())

def create_user(db: Session, *, email: str, full_name: str, school_name: str, password_hash: str) -> User:
    user = User(
        email=email.lower(),
        full_name=full_name,
        school_name=school_name,
        password_hash=password_hash,
        is_verified=False,
    )
    db.add(user)
    return user

def delete_user(db: Session, user: User) -> None:
    db.delete(user)

def create_email_verification(db: Session, user: User, code: str, minutes_valid: int) -> EmailVerification:
    record = EmailVerification.issue(user, code, minutes_valid)
    db.add(record)
    return record

def find_active_verification(db: Session, user_id: str, code: str) -> EmailVerification | None:
    """Most recent unused, unexpired verification record of ``user_id`` with ``code``."""
    stmt = (
        select(EmailVerification)
        .where(
            EmailVerification.user_id == user_id,
            EmailVerification.code == code,
            EmailVerification.is_used.is_(False),
            EmailVerification.expires_at > utcnow(),
        )
        .order_by(EmailVerification.created_at.desc())
        .limit(1)
        .with_for_update()
    )
    return db.execute(stmt).scalars().first()

def create_password_reset(db: Session, user: User, token: str, minutes_valid: int) -> PasswordReset:
    record = PasswordReset.issue(user, token, minutes_valid)
    db.add(record)
    return record

def find_active_password_reset(db: Session, token: str) -> PasswordReset | None:
    stmt = (
        select(PasswordReset)
        .where(
            PasswordReset.token == token,
            PasswordReset.is_used.is_(False),
            PasswordReset.expires_at > utcnow(),
        )
        .order_by(PasswordReset.created_at.desc())
        .limit(1)
        .with_for_update()
    )
    return db.execute(stmt).scalars().first()
