"""
Global pytest configuration and fixtures for the SpareFlow API test suite.
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, Mock

import jwt
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before settings are imported
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"

from spareflow.main import app  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.shipment_fixtures import *  # noqa: F403, F401, E402
from tests.fixtures.user_fixtures import *  # noqa: F403, F401, E402

MODEL_ACCESSORS = [
    "user",
    "part",
    "brandinventory",
    "inventoryledger",
    "wallet",
    "wallettransaction",
    "shipment",
    "box",
    "boxpart",
    "brandauthorization",
    "notification",
    "systemconfig",
    "courierpricing",
    "pricingrule",
]
MODEL_METHODS = [
    "find_unique",
    "find_first",
    "find_many",
    "count",
    "create",
    "create_many",
    "update",
    "update_many",
    "upsert",
    "delete",
    "delete_many",
]


@pytest.fixture
def mock_prisma() -> Mock:
    """
    Mock Prisma client for unit tests that don't need real database.

    ``tx()`` yields the same mock so calls made inside a transaction can be
    asserted on the same accessors.
    """
    mock_db = Mock()
    for accessor in MODEL_ACCESSORS:
        model = Mock()
        for method in MODEL_METHODS:
            setattr(model, method, AsyncMock())
        setattr(mock_db, accessor, model)

    tx_context = MagicMock()
    tx_context.__aenter__ = AsyncMock(return_value=mock_db)
    tx_context.__aexit__ = AsyncMock(return_value=False)
    mock_db.tx = Mock(return_value=tx_context)
    return mock_db


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def valid_jwt_payload() -> Dict[str, Any]:
    """Valid JWT payload for testing."""
    return {
        "sub": "brand-id-123",
        "email": "brand@example.com",
        "role": "BRAND",
    }


@pytest.fixture
def valid_jwt_token(test_jwt_secret: str, valid_jwt_payload: Dict[str, Any]) -> str:
    """Generate a valid JWT token for testing."""
    return jwt.encode(valid_jwt_payload, test_jwt_secret, algorithm="HS256")


@pytest.fixture
def auth_headers(valid_jwt_token: str) -> Dict[str, str]:
    """Generate authentication headers with valid JWT token."""
    return {"Authorization": f"Bearer {valid_jwt_token}"}


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client for API endpoint testing."""
    return TestClient(app)
