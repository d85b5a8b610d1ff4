from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.accounts.constants import Emirate, UserRole
from modules.accounts.models import Address, User
from modules.catalog.constants import ProductUnit
from modules.catalog.models import Category, Product, Stock
from modules.delivery.models import DeliveryZone
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO
from modules.orders.factories import build_order_service

PASSWORD = "Butcher@123"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    # ShopSettings.load() caches the row; rows do not survive a test.
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def make_user(username: str, role: str = UserRole.CUSTOMER, **extra) -> User:
    user = User(
        username=username,
        email=f"{username}@example.ae",
        first_name=username.title(),
        mobile="+971501234567",
        role=role,
        emirate=Emirate.DUBAI,
        **extra,
    )
    user.set_password(PASSWORD)
    user.save()
    return user


def client_for(user: User) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def customer():
    return make_user("ahmed")


@pytest.fixture()
def other_customer():
    return make_user("fatima")


@pytest.fixture()
def staff():
    return make_user("sara", role=UserRole.STAFF)


@pytest.fixture()
def admin():
    return make_user("boss", role=UserRole.ADMIN)


@pytest.fixture()
def driver():
    return make_user("rashid", role=UserRole.DELIVERY)


@pytest.fixture()
def customer_client(customer):
    return client_for(customer)


@pytest.fixture()
def other_client(other_customer):
    return client_for(other_customer)


@pytest.fixture()
def staff_client(staff):
    return client_for(staff)


@pytest.fixture()
def admin_client(admin):
    return client_for(admin)


@pytest.fixture()
def driver_client(driver):
    return client_for(driver)


# ---------------------------------------------------------------------------
# Catalog, delivery and addresses
# ---------------------------------------------------------------------------


@pytest.fixture()
def category():
    return Category.objects.create(name="Beef", name_ar="لحم بقر", slug="beef")


@pytest.fixture()
def product(category):
    product = Product.objects.create(
        sku="BEEF-RIB-001",
        name="Ribeye Steak",
        category=category,
        price=Decimal("50.00"),
        cost_price=Decimal("30.00"),
        unit=ProductUnit.KG,
    )
    Stock.objects.create(product=product, quantity=Decimal("100"))
    return product


@pytest.fixture()
def second_product(category):
    product = Product.objects.create(
        sku="CHK-WHL-001",
        name="Whole Chicken",
        category=category,
        price=Decimal("20.00"),
        unit=ProductUnit.PIECE,
    )
    Stock.objects.create(product=product, quantity=Decimal("10"))
    return product


@pytest.fixture()
def zone():
    return DeliveryZone.objects.create(
        name="Dubai Marina",
        emirate=Emirate.DUBAI,
        areas=["Dubai Marina", "JBR"],
        delivery_fee=Decimal("10.00"),
        minimum_order=Decimal("50.00"),
        express_enabled=True,
        express_fee=Decimal("25.00"),
    )


@pytest.fixture()
def address(customer):
    return Address.objects.create(
        user=customer,
        full_name="Ahmed Ali",
        mobile="+971501234567",
        emirate=Emirate.DUBAI,
        area="Dubai Marina",
        street="Al Marsa Street",
        building="Marina Tower 3",
        apartment="1204",
        is_default=True,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def place_order(product, zone, address):
    """Place an order through the service; 2 kg of ribeye totals 115.00 AED."""

    def _place(customer=None, quantity=Decimal("2"), **fields):
        dto = CreateOrderDTO(
            items=[OrderItemDTO(product_id=product.id, quantity=quantity)],
            address_id=address.id,
            **fields,
        )
        order, _ = build_order_service().create_order(customer or address.user, dto)
        return order

    return _place


@pytest.fixture()
def order(place_order):
    return place_order()
