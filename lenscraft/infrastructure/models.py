# lenscraft/infrastructure/models.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClassORM(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    instructor_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    seats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enrolled_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)

    __table_args__ = (
        CheckConstraint("seats >= 0", name="ck_classes_seats"),
        CheckConstraint("enrolled_count >= 0", name="ck_classes_enrolled"),
        CheckConstraint("enrolled_count <= seats", name="ck_classes_capacity"),
    )

    def __repr__(self) -> str:
        return f"ClassORM(id={self.id!r}, name={self.name!r}, status={self.status!r})"


class CartItemORM(Base):
    __tablename__ = "saved_classes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    instructor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    # str(class_id) or "class_id:email", see domain.cart.slot_key
    slot_key: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"CartItemORM(id={self.id!r}, class_id={self.class_id!r}, email={self.email!r})"


class PaymentORM(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id"), nullable=False, index=True)
    payment_amount: Mapped[float] = mapped_column(Float, nullable=False)
    transaction_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        default=_utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return f"PaymentORM(id={self.id!r}, class_id={self.class_id!r}, email={self.email!r})"


__all__ = [
    "Base",
    "ClassORM",
    "CartItemORM",
    "PaymentORM",
]
