from datetime import datetime, timezone

from sqlalchemy import Boolean, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from users_api.db.base import Base


def utcnow() -> datetime:
    # TIMESTAMP sin zona: se guarda UTC naive
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    cellphone: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", TIMESTAMP, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False
    )
