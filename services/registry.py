from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Union

from pydantic import TypeAdapter

from models.shipping_method import ShippingMethod


logger = logging.getLogger(__name__)


class MethodNotFound(LookupError):
    """No shipping method is registered under the requested id."""

    def __init__(self, method_id: str):
        super().__init__(f"Shipping method not found: {method_id!r}")
        self.method_id = method_id


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------
class ShippingMethodRegistry:
    """
    Read-only mapping of method id -> ShippingMethod.

    Built once at startup and handed to whoever needs it; iteration order is
    registration order.
    """

    def __init__(self, methods: Mapping[str, ShippingMethod] | None = None):
        self._methods: dict[str, ShippingMethod] = {}
        for key, method in (methods or {}).items():
            if not key:
                raise ValueError("Shipping method ids must be non-empty")
            if key != method.id:
                raise ValueError(
                    f"Registry key {key!r} does not match method id {method.id!r}"
                )
            self._methods[key] = method

    @classmethod
    def from_methods(cls, methods: Iterable[ShippingMethod]) -> ShippingMethodRegistry:
        by_id: dict[str, ShippingMethod] = {}
        for method in methods:
            if method.id in by_id:
                raise ValueError(f"Duplicate shipping method id: {method.id!r}")
            by_id[method.id] = method
        return cls(by_id)

    def list(self) -> List[ShippingMethod]:
        return list(self._methods.values())

    def get(self, method_id: str) -> ShippingMethod:
        if not method_id or method_id not in self._methods:
            raise MethodNotFound(method_id)
        return self._methods[method_id]

    def __len__(self) -> int:
        return len(self._methods)

    def __iter__(self) -> Iterator[ShippingMethod]:
        return iter(self._methods.values())

    def __contains__(self, method_id: object) -> bool:
        return method_id in self._methods


# -----------------------------------------------------------------------------
# Population
# -----------------------------------------------------------------------------
BUILTIN_METHODS = (
    ShippingMethod(
        id="flat_rate",
        title="Flat rate",
        description="Lets you charge a fixed rate for shipping.",
    ),
    ShippingMethod(
        id="free_shipping",
        title="Free shipping",
        description="Free shipping is a special method which can be triggered with coupons and minimum spends.",
    ),
    ShippingMethod(
        id="local_pickup",
        title="Local pickup",
        description="Allow customers to pick up orders themselves. By default, when using local pickup store base taxes will apply regardless of customer address.",
    ),
)

_method_list = TypeAdapter(List[ShippingMethod])


def default_registry() -> ShippingMethodRegistry:
    return ShippingMethodRegistry.from_methods(BUILTIN_METHODS)


def load_registry(path: Union[str, Path]) -> ShippingMethodRegistry:
    """
    Build a registry from a JSON file holding a list of
    ``{"id": ..., "title": ..., "description": ...}`` objects.

    Raises pydantic.ValidationError for malformed entries and ValueError for
    duplicate ids.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    registry = ShippingMethodRegistry.from_methods(_method_list.validate_python(raw))
    logger.info("Loaded %d shipping methods from %s", len(registry), path)
    return registry
