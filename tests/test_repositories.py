from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from conftest import TestingSessionLocal, CartItemORM, PaymentORM, count

from lenscraft.domain.cart import CartSlotScope, purchase_owner, slot_key
from lenscraft.domain.entities import ClassStatus, Instructor
from lenscraft.domain.errors import ConflictError, PersistenceError
from lenscraft.infrastructure.uow import SqlAlchemyUnitOfWork

ANSEL = Instructor(name="Ansel", email="instructor@example.com")


def test_slot_key_scopes():
    assert slot_key(3, "a@example.com", CartSlotScope.CLASS) == "3"
    assert slot_key(3, "a@example.com", CartSlotScope.CLASS_EMAIL) == "3:a@example.com"
    assert purchase_owner("a@example.com", CartSlotScope.CLASS) is None
    assert purchase_owner("a@example.com", CartSlotScope.CLASS_EMAIL) == "a@example.com"


def test_cart_slot_is_unique(db, make_class):
    """The store, not a prior lookup, rejects a second row for the same slot"""
    klass = make_class()
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        uow.cart.add(klass.id, "a@example.com", "x", None, 1.0, ANSEL, slot_key=str(klass.id))
        uow.commit()

    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with pytest.raises(ConflictError):
        with uow:
            uow.cart.add(klass.id, "b@example.com", "x", None, 1.0, ANSEL, slot_key=str(klass.id))
            uow.commit()
    assert count(db, CartItemORM) == 1


def test_unit_of_work_discards_uncommitted_writes(db, make_class):
    klass = make_class()
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        uow.payments.add("a@example.com", klass.id, 1.0, "pi_x", datetime.now(timezone.utc))
    assert count(db, PaymentORM) == 0


def test_unit_of_work_wraps_store_failures():
    """Driver errors on commit surface as PersistenceError"""
    mock_db = MagicMock()
    mock_db.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk I/O error"))
    uow = SqlAlchemyUnitOfWork(mock_db)
    with pytest.raises(PersistenceError):
        with uow:
            uow.commit()
    assert mock_db.rollback.called


def test_set_status_is_compare_and_set(db, make_class):
    klass = make_class(status="pending")
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        assert uow.classes.set_status(klass.id, ClassStatus.PENDING, ClassStatus.APPROVED) == 1
        # a second moderator still believing it is pending loses
        assert uow.classes.set_status(klass.id, ClassStatus.PENDING, ClassStatus.DENIED) == 0
        assert uow.classes.get(klass.id).status == ClassStatus.APPROVED
        uow.commit()


def test_increment_enrolled_stops_at_capacity(db, make_class):
    klass = make_class(seats=1)
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        assert uow.classes.increment_enrolled(klass.id) == 1
        assert uow.classes.increment_enrolled(klass.id) == 0
        assert uow.classes.increment_enrolled(9999) == 0
        assert uow.classes.get(klass.id).available_seats == 0
        uow.commit()


def test_new_class_is_pending(db):
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        klass = uow.classes.add("Portraits", None, ANSEL, seats=4, price=25.0)
        uow.commit()
    assert klass.status == ClassStatus.PENDING
    assert klass.enrolled_count == 0


def test_conflicting_insert_leaves_rollback_to_unit_of_work():
    mock_db = MagicMock()
    mock_db.flush.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
    uow = SqlAlchemyUnitOfWork(mock_db)

    with pytest.raises(ConflictError) as excinfo:
        uow.payments.add("a@example.com", 1, 1.0, "pi_x", datetime.now(timezone.utc))
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    mock_db.rollback.assert_not_called()

    with pytest.raises(ConflictError):
        with uow:
            uow.cart.add(1, "a@example.com", "x", None, 1.0, ANSEL, slot_key="1")
    mock_db.rollback.assert_called_once()


def test_cart_delete_is_scoped_to_owner(db, make_class):
    klass = make_class()
    uow = SqlAlchemyUnitOfWork(TestingSessionLocal())
    with uow:
        item = uow.cart.add(klass.id, "a@example.com", "x", None, 1.0, ANSEL, slot_key=str(klass.id))
        assert uow.cart.delete(item.id, email="b@example.com") == 0
        assert uow.cart.delete(item.id, email="a@example.com") == 1
        assert uow.cart.delete(item.id) == 0
        uow.commit()
    assert count(db, CartItemORM) == 0
