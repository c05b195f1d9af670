from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from ....application.dto import SubmitClassInput
from ....application.use_cases.catalog import ModerateClass, SubmitClass
from ....application.use_cases.views import ViewComposer
from ....config import settings
from ....domain.entities import ClassStatus
from ....infrastructure.db import get_db
from ....infrastructure.uow import SqlAlchemyUnitOfWork
from ....infrastructure.cache import (
    APPROVED_CLASSES_KEY,
    POPULAR_CLASSES_KEY,
    get_cache,
    set_cache,
    invalidate_catalog,
)
from ....infrastructure.metrics import cache_hits_total, cache_misses_total, db_queries_total
from ..schemas import ClassCreate, ClassOut, ModerationReq
from ..authz import get_user_email, require_admin, require_instructor

router = APIRouter(prefix="/api", tags=["classes"])


def _cached_listing(cache_key: str, load) -> list[ClassOut]:
    cached = get_cache(cache_key)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    db_queries_total.inc()
    result = [ClassOut.model_validate(c) for c in load()]
    set_cache(cache_key, [r.model_dump(mode="json") for r in result])
    return result


@router.get("/classes", response_model=list[ClassOut])
def approved_classes(db: Session = Depends(get_db)):
    views = ViewComposer(SqlAlchemyUnitOfWork(db))
    return _cached_listing(APPROVED_CLASSES_KEY, views.approved_classes)


@router.get("/popular-classes", response_model=list[ClassOut])
def popular_classes(db: Session = Depends(get_db)):
    limit = settings.POPULAR_CLASSES_LIMIT
    views = ViewComposer(SqlAlchemyUnitOfWork(db))
    return _cached_listing(POPULAR_CLASSES_KEY.format(limit=limit), lambda: views.popular_classes(limit))


# --- Admin moderation:

@router.get("/all-classes", response_model=list[ClassOut], dependencies=[Depends(require_admin)])
def all_classes(db: Session = Depends(get_db)):
    db_queries_total.inc()
    rows = ViewComposer(SqlAlchemyUnitOfWork(db)).all_classes()
    return [ClassOut.model_validate(r) for r in rows]


@router.patch("/classes/{class_id}", response_model=ClassOut, dependencies=[Depends(require_admin)])
def moderate_class(class_id: int, payload: ModerationReq, db: Session = Depends(get_db)):
    klass = ModerateClass(uow=SqlAlchemyUnitOfWork(db)).execute(class_id, ClassStatus(payload.action))
    invalidate_catalog()
    return ClassOut.model_validate(klass)


# --- Instructor submissions:

@router.post("/all-classes", response_model=ClassOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_instructor)])
def submit_class(payload: ClassCreate, email: str = Depends(get_user_email), db: Session = Depends(get_db)):
    # the token, not the body, says who teaches the class
    name = payload.instructor.name if payload.instructor else email
    uc = SubmitClass(uow=SqlAlchemyUnitOfWork(db))
    klass = uc.execute(SubmitClassInput(
        name=payload.name,
        image=payload.image,
        instructor_name=name,
        instructor_email=email,
        seats=payload.seats,
        price=payload.price,
    ))
    invalidate_catalog()
    return ClassOut.model_validate(klass)
