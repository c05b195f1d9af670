from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from ....application.dto import AddToCartInput
from ....application.use_cases.cart import AddToCart, RemoveFromCart
from ....application.use_cases.views import ViewComposer
from ....config import settings
from ....domain.errors import ConflictError
from ....infrastructure.db import get_db
from ....infrastructure.uow import SqlAlchemyUnitOfWork
from ....infrastructure.metrics import cart_conflicts_total, db_queries_total
from ..schemas import CartItemCreate, CartItemOut, DeleteResult, SelectedClassOut
from ..authz import ensure_same_user, get_user_email

router = APIRouter(prefix="/api/selected-classes", tags=["cart"])


@router.get("/{email}", response_model=list[SelectedClassOut])
def selected_classes(email: str, user_email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    ensure_same_user(email, user_email)
    db_queries_total.inc()
    rows = ViewComposer(SqlAlchemyUnitOfWork(db)).selected_classes(email)
    return [SelectedClassOut.model_validate({**asdict(r.item), "available_seats": r.available_seats}) for r in rows]


@router.post("", response_model=CartItemOut, status_code=status.HTTP_201_CREATED)
def add_selected_class(payload: CartItemCreate, user_email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    ensure_same_user(payload.email, user_email)
    uc = AddToCart(uow=SqlAlchemyUnitOfWork(db), scope=settings.CART_SLOT_SCOPE)
    try:
        item = uc.execute(AddToCartInput(
            class_id=payload.class_id,
            email=payload.email,
            name=payload.name,
            image=payload.image,
            price=payload.price,
            instructor_name=payload.instructor.name,
            instructor_email=payload.instructor.email,
        ))
    except ConflictError:
        cart_conflicts_total.inc()
        raise
    return CartItemOut.model_validate(item)


@router.delete("/{item_id}", response_model=DeleteResult)
def remove_selected_class(item_id: int, user_email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    deleted = RemoveFromCart(uow=SqlAlchemyUnitOfWork(db)).execute(item_id, email=user_email)
    return DeleteResult(deleted_count=deleted)
