from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ....application.dto import SavePaymentInput
from ....application.use_cases.enrollment import EnrollFromCart
from ....application.use_cases.views import ViewComposer
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
from ....infrastructure.uow import SqlAlchemyUnitOfWork
from ....infrastructure.cache import invalidate_catalog
from ....infrastructure.metrics import db_queries_total, enrollments_total
from ..schemas import (
    ClassOut,
    DeleteResult,
    EnrolledClassOut,
    PaymentCreate,
    PaymentOut,
    SavePaymentResp,
    UpdateResult,
)
from ..authz import ensure_same_user, get_user_email

router = APIRouter(prefix="/api", tags=["payments"])


@router.get("/enrolled-classes/{email}", response_model=list[EnrolledClassOut])
def enrolled_classes(email: str, user_email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    ensure_same_user(email, user_email)
    db_queries_total.inc()
    rows = ViewComposer(SqlAlchemyUnitOfWork(db)).enrolled_classes(email)
    return [
        EnrolledClassOut.model_validate({
            **asdict(r.payment),
            "class_details": ClassOut.model_validate(r.class_details),
        })
        for r in rows
    ]


@router.post("/save-payment-info", response_model=SavePaymentResp)
def save_payment_info(payload: PaymentCreate, user_email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    ensure_same_user(payload.email, user_email)
    uc = EnrollFromCart(uow=SqlAlchemyUnitOfWork(db))
    try:
        outcome = uc.execute(SavePaymentInput(
            cart_item_id=payload.cart_item_id,
            class_id=payload.class_id,
            email=payload.email,
            payment_amount=payload.payment_amount,
            transaction_id=payload.transaction_id,
        ))
    except DomainError:
        enrollments_total.labels(outcome="rejected").inc()
        raise
    enrollments_total.labels(outcome="completed").inc()
    # occupancy feeds the popular listing
    invalidate_catalog()
    return SavePaymentResp(
        result=PaymentOut.model_validate(outcome.payment),
        delete_result=DeleteResult(deleted_count=outcome.deleted_count),
        update_result=UpdateResult(
            modified_count=outcome.modified_count,
            enrolled_count=outcome.enrolled_count,
        ),
    )
