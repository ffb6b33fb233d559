"""Shared pytest fixtures for the storefront tests."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.config import settings
from storefront.database import get_db, init_db
from storefront.main import app
from storefront.repositories import ProductRepository, Repositories
from storefront.services.catalog import seed_products

TEST_CARD = "4111 1111 1111 1111"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """No real mail, no artificial payment delay, simulated gateway."""
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    monkeypatch.setattr(settings, "EMAIL_DEV_MODE", True)
    monkeypatch.setattr(settings, "PAYMENT_SIMULATION_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "REQUIRE_VERIFIED_EMAIL", False)
    return settings


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """A session with the seed catalog loaded."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    seed_products(ProductRepository(session))
    yield session
    session.close()


@pytest.fixture
def repos(db):
    return Repositories.from_session(db)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def billing():
    return {
        "firstName": "Jane",
        "lastName": "Citizen",
        "company": "Citizen IT",
        "street": "1 George St",
        "city": "Sydney",
        "state": "NSW",
        "postcode": "2000",
        "phone": "0400000000",
    }


@pytest.fixture
def checkout_payload(billing):
    """Build a checkout body; override the card or items per test."""
    def build(card_number=TEST_CARD, items=None, email="jane@example.com"):
        return {
            "email": email,
            "billing": billing,
            "payment": {
                "cardNumber": card_number,
                "expiryDate": "12/29",
                "cvv": "123",
                "cardholderName": "Jane Citizen",
            },
            "items": items if items is not None else [{"productId": "endpoint-protection", "quantity": 1}],
        }

    return build
