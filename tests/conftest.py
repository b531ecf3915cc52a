from __future__ import annotations

import pytest

from models.shipping_method import ShippingMethod
from services.registry import ShippingMethodRegistry
from utils.auth import CapabilityPermissionChecker
from utils.hateoas import RestUrlBuilder


@pytest.fixture
def methods() -> list[ShippingMethod]:
    return [
        ShippingMethod(id="flat_rate", title="Flat rate", description="Fixed cost per order"),
        ShippingMethod(id="free_shipping", title="Free Shipping", description="No cost"),
        ShippingMethod(id="local_pickup", title="Local pickup", description="Collect in store"),
    ]


@pytest.fixture
def registry(methods: list[ShippingMethod]) -> ShippingMethodRegistry:
    return ShippingMethodRegistry.from_methods(methods)


@pytest.fixture
def allow_all() -> CapabilityPermissionChecker:
    return CapabilityPermissionChecker(granted=["shipping_methods:read"], authenticated=True)


@pytest.fixture
def url_builder() -> RestUrlBuilder:
    return RestUrlBuilder("https://shop.example.com/wp-json")
