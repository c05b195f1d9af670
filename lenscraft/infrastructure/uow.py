from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .repositories import CartRepository, ClassRepository, PaymentRepository
from ..application.ports import IUnitOfWork
from ..domain.errors import PersistenceError


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """Repositories bound to one request session; writes land on ``commit()``."""

    def __init__(self, db: Session):
        self.db = db
        self.classes = ClassRepository(db)
        self.cart = CartRepository(db)
        self.payments = PaymentRepository(db)
        self._committed = False

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._committed:
            self.rollback()
        if exc_type is not None and issubclass(exc_type, SQLAlchemyError):
            raise PersistenceError(str(exc)) from exc

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e)) from e
        self._committed = True

    def rollback(self) -> None:
        self.db.rollback()
