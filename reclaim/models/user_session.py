from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from ..core.database import Base, utcnow

class UserSession(Base):
    """One row per sign-in; logout_at stays empty while the session is open."""
    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    ip_address: Mapped[str] = mapped_column(String(255), default="Unknown")
    user_agent: Mapped[str] = mapped_column(String(1024), default="Unknown")
    login_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    logout_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
