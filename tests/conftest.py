"""Pytest configuration and fixtures"""
import itertools
import os

# in-memory sqlite zamiast postgresa, ustawione przed importem aplikacji
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.data.database import Base, build_engine, get_db
from storefront.data.models import ProductModel, ProductVariantModel, UserModel
from storefront.domain.scope import CartScope
from storefront.main import app
from storefront.services.cart_service import CartService
from storefront.services.user_service import UserService, pwd_context

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def test_client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def cart_service(db):
    return CartService(db)


@pytest.fixture
def guest_scope():
    return CartScope.for_guest("guest-session-1")


@pytest.fixture
def make_product(db):
    counter = itertools.count(1)

    def _make(price=1000, stock=100, status="published"):
        n = next(counter)
        product = ProductModel(
            name=f"Product {n}",
            slug=f"product-{n}",
            sku=f"SKU-{n}",
            price=price,
            stock_quantity=stock,
            status=status,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_variant(db):
    counter = itertools.count(1)

    def _make(product, price=1500, stock=100, is_active=True):
        n = next(counter)
        variant = ProductVariantModel(
            product_id=product.id,
            name=f"Variant {n}",
            sku=f"{product.sku}-V{n}",
            price=price,
            stock_quantity=stock,
            is_active=is_active,
        )
        db.add(variant)
        db.commit()
        db.refresh(variant)
        return variant

    return _make


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(name=None, email=None, is_admin=False):
        n = next(counter)
        user = UserModel(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash=pwd_context.hash(TEST_PASSWORD),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers(db):
    """Naglowek Bearer dla danego usera."""

    def _headers(user, **token_kwargs):
        token = UserService(db).create_access_token(user, **token_kwargs)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(make_user, auth_headers):
    return auth_headers(make_user(name="Admin", is_admin=True))
