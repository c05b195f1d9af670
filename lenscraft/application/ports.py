from datetime import datetime

from ..domain.entities import (
    CartItem,
    CatalogClass,
    ClassStatus,
    EnrolledClass,
    Instructor,
    PaymentRecord,
    SelectedClass,
)


class IClassRepository:
    def get(self, class_id: int) -> CatalogClass | None: ...
    def add(self, name: str, image: str | None, instructor: Instructor, seats: int, price: float) -> CatalogClass: ...
    def list_all(self) -> list[CatalogClass]: ...
    def list_by_status(self, status: ClassStatus) -> list[CatalogClass]: ...
    def list_popular(self, limit: int) -> list[CatalogClass]: ...
    def set_status(self, class_id: int, expected: ClassStatus, status: ClassStatus) -> int: ...
    def increment_enrolled(self, class_id: int) -> int: ...


class ICartRepository:
    def get(self, item_id: int) -> CartItem | None: ...
    def add(self, class_id: int, email: str, name: str, image: str | None,
            price: float, instructor: Instructor, slot_key: str) -> CartItem: ...
    def delete(self, item_id: int, email: str | None = None) -> int: ...
    def selected_for(self, email: str) -> list[SelectedClass]: ...


class IPaymentRepository:
    def add(self, email: str, class_id: int, payment_amount: float,
            transaction_id: str, date: datetime) -> PaymentRecord: ...
    def exists_for_class(self, class_id: int, email: str | None = None) -> bool: ...
    def enrolled_for(self, email: str) -> list[EnrolledClass]: ...


class IUnitOfWork:
    """One transaction spanning the catalog, cart and ledger repositories.

    Leaving the ``with`` block without ``commit()`` discards every write.
    """
    classes: IClassRepository
    cart: ICartRepository
    payments: IPaymentRepository

    def __enter__(self) -> "IUnitOfWork": ...
    def __exit__(self, exc_type, exc, tb) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
