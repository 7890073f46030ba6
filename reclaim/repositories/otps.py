from typing import Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..models.otp import PasswordResetOTP


class OTPRepository:
    """Secret store for password reset codes.

    Methods stage changes on the session and never commit.
    """

    def __init__(self, db: Session):
        self.db = db

    def delete_all_for_email(self, email: str) -> int:
        result = self.db.execute(
            delete(PasswordResetOTP)
            .where(PasswordResetOTP.email == email)
        )
        return result.rowcount

    def insert(self, record: PasswordResetOTP) -> PasswordResetOTP:
        self.db.add(record)
        self.db.flush()
        return record

    def find_latest_for_email(self, email: str) -> Optional[PasswordResetOTP]:
        return (
            self.db.query(PasswordResetOTP)
            .filter(PasswordResetOTP.email == email)
            .order_by(PasswordResetOTP.created_at.desc(), PasswordResetOTP.id.desc())
            .first()
        )

    def delete_by_id(self, record_id: int) -> None:
        self.db.execute(
            delete(PasswordResetOTP)
            .where(PasswordResetOTP.id == record_id)
        )

