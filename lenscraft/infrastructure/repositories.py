from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import CartItemORM, ClassORM, PaymentORM
from ..application.ports import ICartRepository, IClassRepository, IPaymentRepository
from ..domain.entities import (
    CartItem,
    CatalogClass,
    ClassStatus,
    EnrolledClass,
    Instructor,
    PaymentRecord,
    SelectedClass,
)
from ..domain.errors import ConflictError


def class_to_domain(c: ClassORM) -> CatalogClass:
    return CatalogClass(
        id=c.id,
        name=c.name,
        image=c.image,
        instructor=Instructor(name=c.instructor_name, email=c.instructor_email),
        seats=c.seats,
        price=c.price,
        enrolled_count=c.enrolled_count,
        status=ClassStatus(c.status),
    )


def cart_to_domain(c: CartItemORM) -> CartItem:
    return CartItem(
        id=c.id,
        class_id=c.class_id,
        email=c.email,
        name=c.name,
        image=c.image,
        price=c.price,
        instructor=Instructor(name=c.instructor_name, email=c.instructor_email),
    )


def payment_to_domain(p: PaymentORM) -> PaymentRecord:
    date = p.date
    if date.tzinfo is None:
        # sqlite drops the offset; everything is written in UTC
        date = date.replace(tzinfo=timezone.utc)
    return PaymentRecord(
        id=p.id,
        email=p.email,
        class_id=p.class_id,
        payment_amount=p.payment_amount,
        transaction_id=p.transaction_id,
        date=date,
    )


class ClassRepository(IClassRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, class_id: int) -> CatalogClass | None:
        row = self.db.get(ClassORM, class_id)
        return class_to_domain(row) if row else None

    def add(self, name: str, image: str | None, instructor: Instructor, seats: int, price: float) -> CatalogClass:
        row = ClassORM(
            name=name,
            image=image,
            instructor_name=instructor.name,
            instructor_email=instructor.email,
            seats=seats,
            price=price,
            enrolled_count=0,
            status=ClassStatus.PENDING.value,
        )
        self.db.add(row); self.db.flush()
        return class_to_domain(row)

    def list_all(self) -> list[CatalogClass]:
        rows = self.db.scalars(select(ClassORM).order_by(ClassORM.id)).all()
        return [class_to_domain(r) for r in rows]

    def list_by_status(self, status: ClassStatus) -> list[CatalogClass]:
        q = select(ClassORM).where(ClassORM.status == status.value).order_by(ClassORM.id)
        return [class_to_domain(r) for r in self.db.scalars(q).all()]

    def list_popular(self, limit: int) -> list[CatalogClass]:
        q = (select(ClassORM)
             .where(ClassORM.status == ClassStatus.APPROVED.value)
             .order_by(ClassORM.enrolled_count.desc(), ClassORM.id)
             .limit(limit))
        return [class_to_domain(r) for r in self.db.scalars(q).all()]

    def set_status(self, class_id: int, expected: ClassStatus, status: ClassStatus) -> int:
        stmt = (update(ClassORM)
                .where(ClassORM.id == class_id, ClassORM.status == expected.value)
                .values(status=status.value)
                .execution_options(synchronize_session=False))
        result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def increment_enrolled(self, class_id: int) -> int:
        """Take one seat in a single conditional UPDATE.

        Returns the number of rows changed: 0 when the class is missing or full.
        """
        stmt = (update(ClassORM)
                .where(ClassORM.id == class_id, ClassORM.enrolled_count < ClassORM.seats)
                .values(enrolled_count=ClassORM.enrolled_count + 1)
                .execution_options(synchronize_session=False))
        result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount


class CartRepository(ICartRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, item_id: int) -> CartItem | None:
        row = self.db.get(CartItemORM, item_id)
        return cart_to_domain(row) if row else None

    def add(self, class_id: int, email: str, name: str, image: str | None,
            price: float, instructor: Instructor, slot_key: str) -> CartItem:
        row = CartItemORM(
            class_id=class_id,
            email=email,
            name=name,
            image=image,
            price=price,
            instructor_name=instructor.name,
            instructor_email=instructor.email,
            slot_key=slot_key,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"cart slot {slot_key} is taken") from e
        return cart_to_domain(row)

    def delete(self, item_id: int, email: str | None = None) -> int:
        """Single DELETE; the rowcount tells whether this call removed the row."""
        stmt = delete(CartItemORM).where(CartItemORM.id == item_id)
        if email is not None:
            stmt = stmt.where(CartItemORM.email == email)
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def selected_for(self, email: str) -> list[SelectedClass]:
        q = (select(CartItemORM, (ClassORM.seats - ClassORM.enrolled_count).label("available_seats"))
             .join(ClassORM, CartItemORM.class_id == ClassORM.id)
             .where(CartItemORM.email == email))
        rows = self.db.execute(q).all()
        return [SelectedClass(item=cart_to_domain(r[0]), available_seats=r[1]) for r in rows]


class PaymentRepository(IPaymentRepository):
    """Append-only ledger: there is no update or delete."""

    def __init__(self, db: Session): self.db = db

    def add(self, email: str, class_id: int, payment_amount: float,
            transaction_id: str, date: datetime) -> PaymentRecord:
        row = PaymentORM(
            email=email,
            class_id=class_id,
            payment_amount=payment_amount,
            transaction_id=transaction_id,
            date=date,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"transaction {transaction_id} is already recorded") from e
        return payment_to_domain(row)

    def exists_for_class(self, class_id: int, email: str | None = None) -> bool:
        q = select(PaymentORM.id).where(PaymentORM.class_id == class_id)
        if email is not None:
            q = q.where(PaymentORM.email == email)
        return self.db.execute(q.limit(1)).first() is not None

    def enrolled_for(self, email: str) -> list[EnrolledClass]:
        q = (select(PaymentORM, ClassORM)
             .join(ClassORM, PaymentORM.class_id == ClassORM.id)
             .where(PaymentORM.email == email)
             .order_by(PaymentORM.date.desc(), PaymentORM.id.desc()))
        rows = self.db.execute(q).all()
        return [EnrolledClass(payment=payment_to_domain(p), class_details=class_to_domain(c)) for p, c in rows]
