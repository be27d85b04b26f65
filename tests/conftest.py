"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from propcalc.main import app
from propcalc.db.database import get_db
from propcalc.db.models import Base
from propcalc.calculations.snapshot import CalculatorSnapshot


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


# Create a shared test database engine
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency globally for all tests
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Create database session for test setup."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def mortgage_snapshot():
    """Buy-to-let mortgage: 300k at 75% LTV, 1.5% fee, 5% interest-only."""
    return CalculatorSnapshot.model_validate(
        {
            "purchaseType": "mortgage",
            "includeFeesInLoan": False,
            "exitStrategy": "just-rent",
            "purchaseFinance": {
                "purchasePrice": "300000",
                "ltv": "75",
                "productFee": "1.5",
                "interestRate": "5",
            },
            "initialCosts": {"legal": "1500", "stampDutyPercent": "3"},
            "monthlyIncome": {"rent1": "1200", "rent2": "800"},
            "monthlyExpenses": {
                "serviceCharge": "50",
                "groundRent": "25",
                "insurance": "30",
                "maintenancePercent": "10",
                "managementPercent": "10",
            },
        }
    )


@pytest.fixture
def bridging_snapshot():
    """Retained bridge on a 200k purchase, flipped at 300k."""
    return CalculatorSnapshot.model_validate(
        {
            "purchaseType": "bridging",
            "exitStrategy": "flip-sell",
            "bridgingDetails": {
                "loanType": "retained",
                "duration": "6",
                "grossLoanPercent": "70",
                "monthlyInterest": "1",
                "applicationFee": "500",
            },
            "purchaseFinance": {"purchasePrice": "200000", "productFee": "2"},
            "initialCosts": {"legal": "1500"},
            "refurbItems": [{"id": 1, "description": "Kitchen", "amount": "30000"}],
            "fundingSources": [
                {
                    "id": 1,
                    "name": "Personal",
                    "amount": "103200",
                    "interestRate": "10",
                    "duration": "6",
                }
            ],
            "saleDetails": {
                "expectedSalePrice": "300000",
                "agencyFeePercent": "1.5",
                "legalFees": "1500",
            },
        }
    )
