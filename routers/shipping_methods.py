from fastapi import APIRouter, Depends, Path, Query, Request, Response
from typing import Any, Dict, List, Union

from config.settings import Settings, get_settings
from models.error import ErrorResponse
from models.shipping_method import ShippingMethodRead
from services.registry import ShippingMethodRegistry
from services.shipping_methods import (
    DEFAULT_CONTEXT,
    RESOURCE_NAME,
    ShippingMethodsController,
)
from utils.auth import PermissionChecker, get_permission_checker
from utils.errors import InvalidParam
from utils.etag import handle_conditional_request, not_modified, set_etag_headers
from utils.hateoas import RestUrlBuilder, get_url_builder


router = APIRouter(
    prefix=f"/{RESOURCE_NAME}",
    tags=["Shipping Methods"],
)

ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    400: {"model": ErrorResponse},
}


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------
def get_registry(request: Request) -> ShippingMethodRegistry:
    return request.app.state.registry


def get_controller(
    request: Request,
    registry: ShippingMethodRegistry = Depends(get_registry),
    permissions: PermissionChecker = Depends(get_permission_checker),
    url_builder: RestUrlBuilder = Depends(get_url_builder),
    app_settings: Settings = Depends(get_settings),
) -> ShippingMethodsController:
    state = request.app.state
    return ShippingMethodsController(
        registry,
        permissions,
        url_builder,
        additional_fields=getattr(state, "additional_fields", ()),
        response_filters=getattr(state, "response_filters", ()),
        namespace=app_settings.API_NAMESPACE,
    )


def validate_context(controller: ShippingMethodsController, context: str) -> str:
    contexts = controller.get_contexts()
    if context not in contexts:
        raise InvalidParam(
            f"Invalid parameter(s): context (context is not one of {', '.join(contexts)})"
        )
    return context


# -----------------------------------------------------------------------------
# GET Endpoints
# -----------------------------------------------------------------------------
@router.get(
    "",
    response_model=List[ShippingMethodRead],
    response_model_exclude_unset=True,
    responses=ERROR_RESPONSES,
    status_code=200,
    name="list_shipping_methods",
)
async def list_shipping_methods(
    request: Request,
    response: Response,
    context: str = Query(DEFAULT_CONTEXT, description="Scope under which the request is made; determines fields present in response."),
    controller: ShippingMethodsController = Depends(get_controller),
):
    """List all registered shipping methods"""
    items = controller.list_items(validate_context(controller, context))

    etag, should_return_304 = handle_conditional_request(request, items)
    if should_return_304:
        return not_modified(etag)

    set_etag_headers(response, etag)
    return items


@router.get(
    "/{method_id}",
    response_model=ShippingMethodRead,
    response_model_exclude_unset=True,
    responses={404: {"model": ErrorResponse}, **ERROR_RESPONSES},
    status_code=200,
    name="get_shipping_method",
)
async def get_shipping_method(
    request: Request,
    response: Response,
    method_id: str = Path(..., description="Shipping method id"),
    context: str = Query(DEFAULT_CONTEXT, description="Scope under which the request is made; determines fields present in response."),
    controller: ShippingMethodsController = Depends(get_controller),
):
    """Get a single shipping method"""
    item = controller.get_item(method_id, validate_context(controller, context))

    etag, should_return_304 = handle_conditional_request(request, item)
    if should_return_304:
        return not_modified(etag)

    set_etag_headers(response, etag)
    return item


# -----------------------------------------------------------------------------
# OPTIONS Endpoints (route description + schema)
# -----------------------------------------------------------------------------
def describe_route(controller: ShippingMethodsController) -> Dict[str, Any]:
    return {
        "namespace": controller.namespace,
        "methods": ["GET"],
        "endpoints": [
            {
                "methods": ["GET"],
                "args": {
                    "context": {
                        "required": False,
                        "default": DEFAULT_CONTEXT,
                        "enum": controller.get_contexts(),
                        "description": "Scope under which the request is made; determines fields present in response.",
                        "type": "string",
                    },
                },
            },
        ],
        "schema": controller.get_item_schema(),
    }


@router.options("", name="describe_shipping_methods")
async def describe_shipping_methods(
    controller: ShippingMethodsController = Depends(get_controller),
):
    return describe_route(controller)


@router.options("/{method_id}", name="describe_shipping_method")
async def describe_shipping_method(
    method_id: str,
    controller: ShippingMethodsController = Depends(get_controller),
):
    return describe_route(controller)
