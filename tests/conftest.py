import os
import tempfile

# configuration is read at import time, so it has to be in place first
_DB_DIR = tempfile.mkdtemp(prefix="thooral-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'app.db')}"
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SMTP_DISABLE", "1")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import db as db_module
from dependencies import get_mailer
from main import app
from models.models_user import User, EmailVerification, PasswordReset, utcnow

PASSWORD = "Passw0rd!"


class FakeMailer:
    """Records deliveries instead of talking to SMTP."""

    def __init__(self):
        self.verifications = []
        self.resets = []
        self.fail = False

    def send_verification_email(self, to_email, code):
        self.verifications.append((to_email, code))
        if self.fail:
            raise ConnectionError("smtp down")
        return True

    def send_password_reset_email(self, to_email, token):
        self.resets.append((to_email, token))
        if self.fail:
            raise ConnectionError("smtp down")
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    db_module.init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(session_factory, mailer):
    def _get_db():
        db = session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[db_module.get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def store(session_factory):
    """Small helper for peeking at and tweaking persisted rows."""
    return Store(session_factory)


class Store:
    def __init__(self, factory):
        self.factory = factory

    def user(self, email):
        with self.factory() as db:
            return db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def count_users(self, email=None):
        with self.factory() as db:
            stmt = select(User)
            if email:
                stmt = stmt.where(User.email == email)
            return len(db.execute(stmt).scalars().all())

    def verifications(self, email):
        with self.factory() as db:
            stmt = (
                select(EmailVerification).join(User)
                .where(User.email == email)
                .order_by(EmailVerification.created_at)
            )
            return db.execute(stmt).scalars().all()

    def resets(self, email):
        with self.factory() as db:
            stmt = select(PasswordReset).join(User).where(User.email == email)
            return db.execute(stmt).scalars().all()

    def expire_verifications(self, email):
        self._expire(EmailVerification, email)

    def expire_resets(self, email):
        self._expire(PasswordReset, email)

    def _expire(self, model, email):
        with self.factory() as db:
            rows = db.execute(select(model).join(User).where(User.email == email)).scalars().all()
            for row in rows:
                row.expires_at = utcnow() - timedelta(minutes=1)
            db.commit()


def register(client, email="a@x.com", password=PASSWORD, **overrides):
    body = {
        "fullName": "Alice",
        "email": email,
        "schoolName": "School",
        "password": password,
        "confirmPassword": password,
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def register_verified(client, mailer, email="a@x.com", password=PASSWORD):
    res = register(client, email=email, password=password)
    assert res.status_code == 201, res.json()
    code = [c for to, c in mailer.verifications if to == email][-1]
    res = client.post("/api/auth/verify-email", json={"email": email, "code": code})
    assert res.status_code == 200, res.json()
    return code


def login(client, email="a@x.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}
