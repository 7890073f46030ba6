from fastapi import Depends
from sqlalchemy.orm import Session
from .core.database import get_db, utcnow
from .core.config import settings
from .core.email import BrevoEmailSender
from .core.security import otp_hasher, password_hasher
from .services.password_reset import PasswordResetService


def get_clock():
    return utcnow


def get_email_sender():
    return BrevoEmailSender()


def get_password_reset_service(
    db: Session = Depends(get_db),
    sender=Depends(get_email_sender),
    clock=Depends(get_clock),
) -> PasswordResetService:
    return PasswordResetService(
        db=db,
        sender=sender,
        otp_hasher=otp_hasher,
        password_hasher=password_hasher,
        expiry_minutes=settings.OTP_EXPIRE_MINUTES,
        clock=clock,
    )
