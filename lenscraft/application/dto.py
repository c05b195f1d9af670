from dataclasses import dataclass


@dataclass
class AddToCartInput:
    class_id: int
    email: str
    name: str
    image: str | None
    price: float
    instructor_name: str
    instructor_email: str


@dataclass
class SavePaymentInput:
    cart_item_id: int
    class_id: int
    email: str
    payment_amount: float
    transaction_id: str


@dataclass
class SubmitClassInput:
    name: str
    image: str | None
    instructor_name: str
    instructor_email: str
    seats: int
    price: float
