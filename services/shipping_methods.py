from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from config.settings import settings
from models.hateoas import HATEOASLinks
from models.schema import FieldSchema, ResourceSchema, SHIPPING_METHOD_SCHEMA
from models.shipping_method import ShippingMethod, ShippingMethodRead
from services.registry import MethodNotFound, ShippingMethodRegistry
from utils.auth import PermissionChecker
from utils.errors import Forbidden, InvalidResource
from utils.hateoas import UrlBuilder, build_resource_links


logger = logging.getLogger(__name__)

RESOURCE_NAME = "shipping_methods"
DEFAULT_CONTEXT = "view"

# Keys owned by the base representation; extension fields may not use them
RESERVED_FIELDS = frozenset({"id", "title", "description", "_links", "links"})


class FieldCollisionError(ValueError):
    """An extension field tried to overwrite a reserved or already merged key."""


@dataclass(frozen=True)
class AdditionalField:
    """Extension field merged into every shipping method response."""
    name: str
    get_value: Callable[[ShippingMethod], Any]
    schema: Optional[FieldSchema] = None


# (item, method, context) -> item
ResponseFilter = Callable[[ShippingMethodRead, ShippingMethod, str], ShippingMethodRead]


def check_additional_fields(
    fields: Sequence[AdditionalField],
    schema: ResourceSchema = SHIPPING_METHOD_SCHEMA,
) -> None:
    """Raise FieldCollisionError if a field reuses a reserved, base or earlier field name."""
    taken = set(RESERVED_FIELDS) | set(schema.properties)
    for field in fields:
        if field.name in taken:
            raise FieldCollisionError(
                f"Additional field {field.name!r} collides with an existing field"
            )
        taken.add(field.name)


# -----------------------------------------------------------------------------
# Controller
# -----------------------------------------------------------------------------
class ShippingMethodsController:
    """
    Read-only REST controller over a ShippingMethodRegistry.

    All collaborators are passed in: the registry, the permission checker,
    the URL builder used for links, extension fields and response filters.
    """

    def __init__(
        self,
        registry: ShippingMethodRegistry,
        permissions: PermissionChecker,
        url_builder: UrlBuilder,
        *,
        schema: ResourceSchema = SHIPPING_METHOD_SCHEMA,
        additional_fields: Sequence[AdditionalField] = (),
        response_filters: Sequence[ResponseFilter] = (),
        namespace: Optional[str] = None,
        rest_base: str = RESOURCE_NAME,
    ):
        self.registry = registry
        self.permissions = permissions
        self.url_builder = url_builder
        self.schema = schema
        check_additional_fields(additional_fields, schema)
        self.additional_fields = tuple(additional_fields)
        self.response_filters = tuple(response_filters)
        self.namespace = (namespace or settings.API_NAMESPACE).strip("/")
        self.rest_base = rest_base

    # -------------------------------------------------------------------------
    # Permissions
    # -------------------------------------------------------------------------
    def get_items_permissions_check(self) -> None:
        if not self.permissions.check(RESOURCE_NAME, "read"):
            raise Forbidden(
                "cannot_list",
                "Sorry, you cannot list resources.",
                self.permissions.authorization_required_code(),
            )

    def get_item_permissions_check(self) -> None:
        if not self.permissions.check(RESOURCE_NAME, "read"):
            raise Forbidden(
                "cannot_view",
                "Sorry, you cannot view this resource.",
                self.permissions.authorization_required_code(),
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------
    def list_items(self, context: str = DEFAULT_CONTEXT) -> List[ShippingMethodRead]:
        self.get_items_permissions_check()
        return [
            self.prepare_item_for_response(method, context)
            for method in self.registry.list()
        ]

    def get_item(self, method_id: str, context: str = DEFAULT_CONTEXT) -> ShippingMethodRead:
        self.get_item_permissions_check()
        try:
            method = self.registry.get(method_id)
        except MethodNotFound:
            raise InvalidResource("shipping_method_invalid") from None

        return self.prepare_item_for_response(method, context)

    # -------------------------------------------------------------------------
    # Shaping
    # -------------------------------------------------------------------------
    def prepare_item_for_response(self, method: ShippingMethod, context: Optional[str] = None) -> ShippingMethodRead:
        context = context or DEFAULT_CONTEXT

        data: Dict[str, Any] = {
            "id": method.id,
            "title": method.title,
            "description": method.description,
        }
        data = self.add_additional_fields(data, method)
        data = self.filter_by_context(data, context)
        data["_links"] = self.prepare_links(method)

        item = ShippingMethodRead.model_validate(data)
        for response_filter in self.response_filters:
            item = response_filter(item, method, context)

        logger.debug("Prepared shipping method %s for context %s", method.id, context)
        return item

    def add_additional_fields(self, data: Dict[str, Any], method: ShippingMethod) -> Dict[str, Any]:
        merged = dict(data)
        for field in self.additional_fields:
            merged[field.name] = field.get_value(method)
        return merged

    def filter_by_context(self, data: Dict[str, Any], context: str) -> Dict[str, Any]:
        """Drop fields whose schema declares contexts not including ``context``; undeclared fields are kept."""
        properties = self.get_schema().properties
        return {
            key: value
            for key, value in data.items()
            if key not in properties or properties[key].visible_in(context)
        }

    def prepare_links(self, method: ShippingMethod) -> HATEOASLinks:
        return build_resource_links(self.url_builder, self.namespace, self.rest_base, method.id)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------
    def get_schema(self) -> ResourceSchema:
        extra = {
            field.name: field.schema
            for field in self.additional_fields
            if field.schema is not None
        }
        if not extra:
            return self.schema
        return self.schema.with_fields(extra)

    def get_item_schema(self) -> Dict[str, Any]:
        return self.get_schema().to_json_schema()

    def get_contexts(self) -> List[str]:
        return self.get_schema().contexts() or [DEFAULT_CONTEXT]
