"""
Pytest configuration for product_service: the shared signing secret and a fresh,
seeded product store per test.
"""
import os

os.environ["SHOP_JWT_SECRET"] = "test-signing-secret-0123456789abcdefghijklmnop"

import pytest  # noqa: E402

from product_service.main import app  # noqa: E402
from product_service.store import ProductStore, get_store, seed_sample_products  # noqa: E402


@pytest.fixture
def store():
    fresh = ProductStore()
    seed_sample_products(fresh)
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.pop(get_store, None)
