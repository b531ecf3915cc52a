from __future__ import annotations

import pytest

from models.schema import FieldSchema, ResourceSchema, SHIPPING_METHOD_SCHEMA
from models.shipping_method import ShippingMethod, ShippingMethodRead
from services.registry import ShippingMethodRegistry
from services.shipping_methods import (
    AdditionalField,
    FieldCollisionError,
    ShippingMethodsController,
)
from utils.auth import CapabilityPermissionChecker
from utils.errors import Forbidden, InvalidResource


def make_controller(registry, permissions, url_builder, **kwargs) -> ShippingMethodsController:
    kwargs.setdefault("namespace", "wc/v1")
    return ShippingMethodsController(registry, permissions, url_builder, **kwargs)


@pytest.fixture
def controller(registry, allow_all, url_builder) -> ShippingMethodsController:
    return make_controller(registry, allow_all, url_builder)


# -----------------------------------------------------------------------------
# get_item
# -----------------------------------------------------------------------------
def test_get_item_copies_descriptor_fields(controller, methods) -> None:
    for method in methods:
        item = controller.get_item(method.id, "view")
        assert item.id == method.id
        assert item.title == method.title
        assert item.description == method.description


@pytest.mark.parametrize("method_id", ["", "table_rate"])
def test_get_item_unknown_id_is_invalid_resource(controller, method_id: str) -> None:
    with pytest.raises(InvalidResource) as excinfo:
        controller.get_item(method_id)
    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "shipping_method_invalid"
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__


def test_get_item_links(controller) -> None:
    item = controller.get_item("flat_rate")
    assert list(item.links) == ["self", "collection"]
    assert item.links["self"][0].href == "https://shop.example.com/wp-json/wc/v1/shipping_methods/flat_rate"
    assert item.links["self"][0].href.endswith("/shipping_methods/flat_rate")
    assert item.links["collection"][0].href.endswith("/shipping_methods")


# -----------------------------------------------------------------------------
# list_items
# -----------------------------------------------------------------------------
def test_list_items_matches_registry_order(controller, registry) -> None:
    items = controller.list_items("view")
    assert len(items) == len(registry)
    assert [item.id for item in items] == [m.id for m in registry.list()]


def test_list_items_empty_registry(allow_all, url_builder) -> None:
    controller = make_controller(ShippingMethodRegistry(), allow_all, url_builder)
    assert controller.list_items() == []


def test_operations_are_idempotent(controller) -> None:
    first = [item.model_dump(by_alias=True) for item in controller.list_items()]
    second = [item.model_dump(by_alias=True) for item in controller.list_items()]
    assert first == second
    assert controller.get_item("free_shipping") == controller.get_item("free_shipping")


def test_single_method_scenario(allow_all, url_builder) -> None:
    registry = ShippingMethodRegistry.from_methods(
        [ShippingMethod(id="free_shipping", title="Free Shipping", description="No cost")]
    )
    controller = make_controller(registry, allow_all, url_builder)

    items = controller.list_items()
    assert len(items) == 1
    assert items[0].model_dump(exclude={"links"}) == {
        "id": "free_shipping",
        "title": "Free Shipping",
        "description": "No cost",
    }
    with pytest.raises(InvalidResource):
        controller.get_item("flat_rate")


# -----------------------------------------------------------------------------
# Context filtering
# -----------------------------------------------------------------------------
def test_view_context_returns_all_base_fields(controller) -> None:
    item = controller.get_item("flat_rate", "view")
    assert {"id", "title", "description"} <= item.model_fields_set


def test_unknown_context_drops_view_only_fields(controller) -> None:
    item = controller.get_item("flat_rate", "embed")
    dumped = item.model_dump(by_alias=True, exclude_unset=True)
    assert list(dumped) == ["_links"]
    assert dumped["_links"]["self"] == [{"href": "https://shop.example.com/wp-json/wc/v1/shipping_methods/flat_rate"}]


def test_visibility_comes_from_schema(registry, allow_all, url_builder) -> None:
    schema = ResourceSchema(
        title="shipping_method",
        properties={
            "id": FieldSchema(type="string", context=["view", "embed"]),
            "title": FieldSchema(type="string", context=["view", "embed"]),
            "description": FieldSchema(type="string", context=["view"]),
        },
    )
    controller = make_controller(registry, allow_all, url_builder, schema=schema)

    item = controller.get_item("flat_rate", "embed")
    assert item.model_dump(exclude_unset=True, exclude={"links"}) == {
        "id": "flat_rate",
        "title": "Flat rate",
    }
    assert controller.get_contexts() == ["view", "embed"]


# -----------------------------------------------------------------------------
# Extension fields and response filters
# -----------------------------------------------------------------------------
def test_additional_fields_are_merged(registry, allow_all, url_builder) -> None:
    field = AdditionalField(
        name="enabled",
        get_value=lambda method: method.id != "local_pickup",
        schema=FieldSchema(type="boolean", description="Whether the method is enabled.", context=["view"]),
    )
    controller = make_controller(registry, allow_all, url_builder, additional_fields=[field])

    assert getattr(controller.get_item("flat_rate"), "enabled") is True
    assert getattr(controller.get_item("local_pickup"), "enabled") is False
    assert "enabled" in controller.get_item_schema()["properties"]


def test_additional_field_without_schema_is_always_kept(registry, allow_all, url_builder) -> None:
    field = AdditionalField(name="zone_count", get_value=lambda method: 2)
    controller = make_controller(registry, allow_all, url_builder, additional_fields=[field])

    dumped = controller.get_item("flat_rate", "embed").model_dump(exclude_unset=True, exclude={"links"})
    assert dumped == {"zone_count": 2}


@pytest.mark.parametrize("name", ["id", "title", "description", "_links"])
def test_additional_field_collisions_are_rejected(registry, allow_all, url_builder, name: str) -> None:
    field = AdditionalField(name=name, get_value=lambda method: "x", schema=FieldSchema(type="string"))

    with pytest.raises(FieldCollisionError):
        make_controller(registry, allow_all, url_builder, additional_fields=[field])


def test_duplicate_additional_fields_are_rejected(registry, allow_all, url_builder) -> None:
    fields = [
        AdditionalField(name="cost", get_value=lambda method: 1),
        AdditionalField(name="cost", get_value=lambda method: 2),
    ]
    with pytest.raises(FieldCollisionError):
        make_controller(registry, allow_all, url_builder, additional_fields=fields)


def test_response_filters_run_in_order(registry, allow_all, url_builder) -> None:
    calls = []

    def first(item: ShippingMethodRead, method: ShippingMethod, context: str) -> ShippingMethodRead:
        calls.append(("first", method.id, context))
        return item.model_copy(update={"title": item.title.upper()})

    def second(item: ShippingMethodRead, method: ShippingMethod, context: str) -> ShippingMethodRead:
        calls.append(("second", method.id, context))
        return item

    controller = make_controller(registry, allow_all, url_builder, response_filters=[first, second])

    assert controller.get_item("flat_rate").title == "FLAT RATE"
    assert calls == [("first", "flat_rate", "view"), ("second", "flat_rate", "view")]


# -----------------------------------------------------------------------------
# Permissions
# -----------------------------------------------------------------------------
def test_list_items_forbidden(registry, url_builder) -> None:
    permissions = CapabilityPermissionChecker(granted=[], authenticated=False)
    controller = make_controller(registry, permissions, url_builder)

    with pytest.raises(Forbidden) as excinfo:
        controller.list_items()
    assert excinfo.value.code == "cannot_list"
    assert excinfo.value.status_code == 401


def test_get_item_forbidden_forwards_host_status(registry, url_builder) -> None:
    permissions = CapabilityPermissionChecker(granted=["orders:read"], authenticated=True)
    controller = make_controller(registry, permissions, url_builder)

    with pytest.raises(Forbidden) as excinfo:
        controller.get_item("flat_rate")
    assert excinfo.value.code == "cannot_view"
    assert excinfo.value.status_code == 403


def test_permission_is_checked_before_lookup(registry, url_builder) -> None:
    permissions = CapabilityPermissionChecker(granted=[], authenticated=True)
    controller = make_controller(registry, permissions, url_builder)

    with pytest.raises(Forbidden):
        controller.get_item("does_not_exist")


# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------
def test_item_schema(controller) -> None:
    schema = controller.get_item_schema()
    assert schema["$schema"] == "http://json-schema.org/draft-04/schema#"
    assert schema["title"] == "shipping_method"
    assert schema["type"] == "object"
    assert list(schema["properties"]) == ["id", "title", "description"]
    for prop in schema["properties"].values():
        assert prop["type"] == "string"
        assert prop["context"] == ["view"]


def test_base_schema_is_not_mutated_by_extensions(registry, allow_all, url_builder) -> None:
    field = AdditionalField(name="cost", get_value=lambda method: 0, schema=FieldSchema(type="number"))
    controller = make_controller(registry, allow_all, url_builder, additional_fields=[field])

    assert "cost" in controller.get_item_schema()["properties"]
    assert "cost" not in SHIPPING_METHOD_SCHEMA.properties


def test_extension_schema_cannot_replace_base_field(registry, allow_all, url_builder) -> None:
    field = AdditionalField(
        name="description",
        get_value=lambda method: "",
        schema=FieldSchema(type="string", context=["edit"]),
    )

    with pytest.raises(FieldCollisionError):
        make_controller(registry, allow_all, url_builder, additional_fields=[field])
    assert SHIPPING_METHOD_SCHEMA.properties["description"].context == ["view"]


def test_custom_schema_fields_are_reserved(registry, allow_all, url_builder) -> None:
    schema = SHIPPING_METHOD_SCHEMA.with_fields({"cost": FieldSchema(type="number", context=["view"])})
    field = AdditionalField(name="cost", get_value=lambda method: 0)

    with pytest.raises(FieldCollisionError):
        make_controller(registry, allow_all, url_builder, schema=schema, additional_fields=[field])
