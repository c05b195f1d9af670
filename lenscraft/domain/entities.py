from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ClassStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class Role(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Instructor:
    name: str
    email: str


@dataclass(frozen=True)
class CatalogClass:
    id: int | None
    name: str
    image: str | None
    instructor: Instructor
    seats: int
    price: float
    enrolled_count: int = 0
    status: ClassStatus = ClassStatus.PENDING

    @property
    def available_seats(self) -> int:
        return self.seats - self.enrolled_count


@dataclass(frozen=True)
class CartItem:
    id: int | None
    class_id: int
    email: str
    name: str
    image: str | None
    price: float
    instructor: Instructor


@dataclass(frozen=True)
class PaymentRecord:
    id: int | None
    email: str
    class_id: int
    payment_amount: float
    transaction_id: str
    date: datetime


@dataclass(frozen=True)
class SelectedClass:
    """Cart row joined with its class; only the seat count survives the join."""
    item: CartItem
    available_seats: int


@dataclass(frozen=True)
class EnrolledClass:
    payment: PaymentRecord
    class_details: CatalogClass


@dataclass(frozen=True)
class EnrollmentOutcome:
    payment: PaymentRecord
    deleted_count: int
    modified_count: int
    enrolled_count: int
