import os
import sys
from datetime import datetime, timezone

import pytest

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_lenscraft.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/99")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lenscraft.infrastructure import cache
from lenscraft.infrastructure.db import get_db
from lenscraft.infrastructure.models import Base, CartItemORM, ClassORM, PaymentORM
from lenscraft.interfaces.http.authz import get_user_email, require_admin, require_instructor
from lenscraft.main import app

# one in-memory database shared by every connection
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

STUDENT = "student@example.com"
INSTRUCTOR = "instructor@example.com"
ADMIN = "admin@example.com"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def redis_unavailable(monkeypatch):
    """Every cache call behaves as if Redis were down."""
    def _unavailable():
        raise ConnectionError("redis disabled in tests")
    monkeypatch.setattr(cache, "get_redis", _unavailable)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    yield TestClient(app)


def _override(dependency, value):
    app.dependency_overrides[dependency] = lambda: value


@pytest.fixture
def as_user():
    """Switch the authenticated user; returns a setter."""
    def _login(email: str = STUDENT, role: str = "student"):
        claims = {"sub": email, "role": role}
        _override(get_user_email, email)
        if role == "admin":
            _override(require_admin, claims)
        if role == "instructor":
            _override(require_instructor, claims)
        return email
    yield _login
    for dep in (get_user_email, require_admin, require_instructor):
        app.dependency_overrides.pop(dep, None)


@pytest.fixture
def make_class(db):
    def _make(name="Street Photography", seats=10, enrolled_count=0, status="approved", price=49.0):
        row = ClassORM(
            name=name,
            image=f"https://img.example.com/{name.lower().replace(' ', '-')}.jpg",
            instructor_name="Ansel",
            instructor_email=INSTRUCTOR,
            seats=seats,
            enrolled_count=enrolled_count,
            price=price,
            status=status,
        )
        db.add(row); db.commit(); db.refresh(row)
        return row
    return _make


@pytest.fixture
def make_payment(db):
    def _make(class_id, email=STUDENT, date=None, transaction_id=None, amount=49.0):
        row = PaymentORM(
            email=email,
            class_id=class_id,
            payment_amount=amount,
            transaction_id=transaction_id or f"pi_{class_id}_{email}_{date}",
            date=date or datetime.now(timezone.utc),
        )
        db.add(row); db.commit(); db.refresh(row)
        return row
    return _make


def cart_payload(klass, email=STUDENT):
    return {
        "classId": klass.id,
        "name": klass.name,
        "image": klass.image,
        "price": klass.price,
        "instructor": {"name": klass.instructor_name, "email": klass.instructor_email},
        "email": email,
    }


def count(db, model, **filters):
    db.expire_all()
    return db.query(model).filter_by(**filters).count()


__all__ = ["cart_payload", "count", "CartItemORM", "ClassORM", "PaymentORM"]
