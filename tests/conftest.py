from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.coupons.models import Coupon, CouponStatus, DiscountType
from modules.customers.models import Customer
from modules.products.models import Product, ProductStatus

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters and shipping distances live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated staff user."""
    client = APIClient()
    user = User.objects.create_user(username="atendente", password="testpass123")
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Domain fixtures shared by unit and integration tests
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return Customer.objects.create(
        name="Maria Confeitaria",
        phone="11987654321",
        email="maria@example.com",
    )


@pytest.fixture()
def brigadeiro():
    return Product.objects.create(
        sku="BRI-001",
        name="Brigadeiro Gourmet",
        price=Decimal("10.00"),
        stock_quantity=5,
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def bolo():
    return Product.objects.create(
        sku="BOL-001",
        name="Bolo de Cenoura",
        price=Decimal("45.00"),
        stock_quantity=10,
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def bemvindo10():
    """10% off carts of at least R$ 20.00, 100 uses."""
    return Coupon.objects.create(
        code="BEMVINDO10",
        status=CouponStatus.ACTIVE,
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        minimum_cart_value=Decimal("20.00"),
        usage_limit=100,
    )
