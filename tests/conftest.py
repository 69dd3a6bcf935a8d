import os
from datetime import timedelta
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _storefront_domain():
    """Initialize the storefront domain once per session."""
    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_category():
    from protean import current_domain

    from storefront.catalogue.management import CreateCategory

    def _make(name="Apparel"):
        return current_domain.process(CreateCategory(name=name), asynchronous=False)

    return _make


@pytest.fixture()
def make_product(make_category):
    """Create a product through the admin command and return its id."""
    import json

    from protean import current_domain

    from storefront.catalogue.management import CreateProduct

    category_ids = {}

    def _make(title="Classic Tee", price=50.0, stock=10, sizes=("S", "M", "L"), category="Apparel", **extra):
        if category not in category_ids:
            category_ids[category] = make_category(category)
        return current_domain.process(
            CreateProduct(
                title=title,
                description=f"{title} description",
                brand=extra.pop("brand", "Acme"),
                category_id=category_ids[category],
                price=price,
                stock=stock,
                images=json.dumps(extra.pop("images", ["https://cdn.example.com/p.jpg"])),
                sizes=json.dumps(list(sizes)),
                tags=json.dumps(extra.pop("tags", ["cotton"])),
                **extra,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_coupon():
    from protean import current_domain

    from storefront.coupons.management import CreateCoupon
    from storefront.shared.clock import utcnow

    def _make(code="SAVE10", discount_percent=10.0, minimum_order_amount=0.0, usage_limit=100, days=30):
        return current_domain.process(
            CreateCoupon(
                code=code,
                discount_percent=discount_percent,
                expiry_date=utcnow() + timedelta(days=days),
                minimum_order_amount=minimum_order_amount,
                usage_limit=usage_limit,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Sam Rivera",
        "address_line1": "123 Main St",
        "address_line2": None,
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
        "phone": "+1-555-0100",
    }


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------
@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from storefront.api import create_app

    return TestClient(create_app())


@pytest.fixture()
def auth_headers():
    """Bearer headers for a user with the given role."""
    from storefront.api.auth import create_access_token

    def _headers(user_id="cust-api-001", role="customer"):
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _headers


@pytest.fixture()
def admin_headers(auth_headers):
    return auth_headers("admin-001", "admin")
