# Password reset via emailed one-time password
#
# Issuance:     email -> (account?) -> drop old codes -> store hash -> send code
# Verification: email + code + new password -> latest code -> expiry -> compare
#               -> update credential and consume code in one transaction

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.database import utcnow
from ..core.errors import DispatchError, ExpiredOTP, InvalidOrExpiredOTP, NotFoundError
from ..core.security import SecretHasher
from ..models.otp import PasswordResetOTP
from ..repositories.otps import OTPRepository
from ..repositories.users import UserRepository

logger = logging.getLogger(__name__)

SEND_OTP_MESSAGE = "If an account with that email exists, an OTP has been sent."
RESET_SUCCESS_MESSAGE = "Password reset successfully. You can now sign in with your new password."


def generate_otp() -> str:
    """Generate a 6-digit OTP code, uniform over 100000-999999."""
    return str(secrets.randbelow(900000) + 100000)


@dataclass
class SendOTPResult:
    message: str
    expiry_minutes: int


class PasswordResetService:
    def __init__(
        self,
        db: Session,
        sender,
        otp_hasher: SecretHasher,
        password_hasher: SecretHasher,
        expiry_minutes: int,
        clock: Callable[[], datetime] = utcnow,
        users: Optional[UserRepository] = None,
        otps: Optional[OTPRepository] = None,
    ):
        self.db = db
        self.sender = sender
        self.otp_hasher = otp_hasher
        self.password_hasher = password_hasher
        self.expiry_minutes = expiry_minutes
        self.clock = clock
        self.users = users or UserRepository(db)
        self.otps = otps or OTPRepository(db)

    async def send_otp(self, email: str) -> SendOTPResult:
        """Issue a fresh code for ``email`` (already normalized) and mail it.

        The result is the same whether or not an account exists, so callers
        cannot tell which addresses are registered. Database and bcrypt work runs
        in the threadpool; only the dispatch is awaited on the event loop.
        """
        result = SendOTPResult(message=SEND_OTP_MESSAGE, expiry_minutes=self.expiry_minutes)

        issued = await run_in_threadpool(self._store_new_code, email)
        if issued is None:
            return result
        user_id, otp = issued

        try:
            await self.sender.send(email, otp, self.expiry_minutes)
        except Exception as exc:
            logger.error("OTP dispatch failed for user_id=%s: %s", user_id, exc)
            await run_in_threadpool(self._discard_codes, email)
            if isinstance(exc, DispatchError):
                raise
            raise DispatchError() from exc

        return result

    def _store_new_code(self, email: str) -> Optional[Tuple[int, str]]:
        """Replace any codes for ``email`` with a new one; None if no account."""
        user = self.users.find_by_email(email)
        if not user:
            return None

        otp = generate_otp()
        now = self.clock()
        try:
            self.otps.delete_all_for_email(email)
            self.otps.insert(
                PasswordResetOTP(
                    email=email,
                    otp_hash=self.otp_hasher.hash(otp),
                    expires_at=now + timedelta(minutes=self.expiry_minutes),
                    created_at=now,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Password reset OTP issued for user_id=%s", user.id)
        return user.id, otp

    def _discard_codes(self, email: str) -> None:
        self.otps.delete_all_for_email(email)
        self.db.commit()

    def verify_otp(self, email: str, otp: str, new_password: str) -> str:
        """Check ``otp`` for ``email`` and, if it matches, set the new password."""
        record = self.otps.find_latest_for_email(email)
        if not record:
            raise InvalidOrExpiredOTP()

        if self.clock() > record.expires_at:
            self.otps.delete_by_id(record.id)
            self.db.commit()
            raise ExpiredOTP()

        # Kept on mismatch so the user can retry inside the window
        if not self.otp_hasher.verify(otp, record.otp_hash):
            raise InvalidOrExpiredOTP()

        user = self.users.find_by_email(email)
        if not user:
            self.otps.delete_by_id(record.id)
            self.db.commit()
            raise NotFoundError("User not found")

        new_hash = self.password_hasher.hash(new_password)

        try:
            self.users.update_password_hash(user, new_hash)
            self.otps.delete_by_id(record.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._sweep(email)
        logger.info("Password reset completed for user_id=%s", user.id)
        return RESET_SUCCESS_MESSAGE

    def _sweep(self, email: str) -> None:
        try:
            self.otps.delete_all_for_email(email)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Could not clear leftover OTPs after password reset", exc_info=True)
