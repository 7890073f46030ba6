"""
Shared fixtures: in-memory database, fake email sender and a movable clock.
"""
import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OTP_BCRYPT_ROUNDS"] = "4"
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["BREVO_API_KEY"] = ""
os.environ["EMAIL_DEV_MODE"] = "false"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from reclaim.core.database import Base, SessionLocal, engine, utcnow
from reclaim.core.errors import DispatchError
from reclaim.core.security import get_password_hash, verify_password
from reclaim.dependencies import get_clock, get_email_sender
from reclaim.main import app
from reclaim.models.otp import PasswordResetOTP
from reclaim.models.user import User


class FakeSender:
    """Records every OTP email instead of sending it."""

    def __init__(self):
        self.sent = []
        self.error = None

    async def send(self, to_email, code, expiry_minutes):
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to_email, "code": code, "expiry_minutes": expiry_minutes})

    def fail_with(self, error=None):
        self.error = error or DispatchError()

    @property
    def last_code(self):
        return self.sent[-1]["code"]


class FakeClock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def clean_tables():
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()
    with SessionLocal() as db:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(sender, clock):
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user():
    def _make_user(email="user@x.edu", password="old-password", name="Test User"):
        with SessionLocal() as db:
            user = User(name=name, email=email, password_hash=get_password_hash(password))
            db.add(user)
            db.commit()
            return user.id
    return _make_user


def otp_records(email):
    with SessionLocal() as db:
        return (
            db.query(PasswordResetOTP)
            .filter(PasswordResetOTP.email == email)
            .order_by(PasswordResetOTP.id)
            .all()
        )


def password_matches(email, password):
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == email).first()
        return verify_password(password, user.password_hash)
