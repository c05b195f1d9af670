from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel

from ...domain.entities import ClassStatus


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class InstructorIn(CamelModel):
    name: str
    email: EmailStr


class InstructorOut(CamelModel):
    name: str
    email: str


# --- Catalog

class ClassCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    image: str | None = None
    instructor: InstructorIn | None = None
    seats: int = Field(ge=0)
    price: float = Field(ge=0)


class ClassOut(CamelModel):
    id: int
    name: str
    image: str | None = None
    instructor: InstructorOut
    seats: int
    enrolled_count: int
    available_seats: int
    price: float
    status: ClassStatus


class ModerationReq(CamelModel):
    action: Literal["approved", "denied"]


# --- Cart

class CartItemCreate(CamelModel):
    class_id: int
    name: str
    image: str | None = None
    price: float = Field(ge=0)
    instructor: InstructorIn
    email: EmailStr


class CartItemOut(CamelModel):
    id: int
    class_id: int
    email: str
    name: str
    image: str | None = None
    price: float
    instructor: InstructorOut


class SelectedClassOut(CartItemOut):
    available_seats: int


class DeleteResult(CamelModel):
    deleted_count: int


# --- Payments

class PaymentCreate(CamelModel):
    cart_item_id: int
    class_id: int
    email: EmailStr
    payment_amount: float = Field(ge=0)
    transaction_id: str = Field(min_length=1, max_length=255)


class PaymentOut(CamelModel):
    id: int
    email: str
    class_id: int
    payment_amount: float
    transaction_id: str
    date: datetime


class EnrolledClassOut(PaymentOut):
    class_details: ClassOut


class UpdateResult(CamelModel):
    modified_count: int
    enrolled_count: int


class SavePaymentResp(CamelModel):
    result: PaymentOut
    delete_result: DeleteResult
    update_result: UpdateResult
