from typing import Optional, Protocol

from fastapi import Depends, Request

from config.settings import Settings, get_settings
from models.hateoas import HATEOASLink, HATEOASLinks


class UrlBuilder(Protocol):
    def __call__(self, namespace: str, base: str, item_id: Optional[str] = None) -> str: ...


class RestUrlBuilder:
    """Builds absolute REST URLs as ``<root>/<namespace>/<base>[/<id>]``."""

    def __init__(self, root: str):
        self.root = root.rstrip("/")

    def __call__(self, namespace: str, base: str, item_id: Optional[str] = None) -> str:
        parts = [self.root, namespace.strip("/"), base.strip("/")]
        if item_id is not None:
            parts.append(item_id)
        return "/".join(parts)


def get_url_builder(
    request: Request,
    app_settings: Settings = Depends(get_settings),
) -> RestUrlBuilder:
    return RestUrlBuilder(app_settings.REST_URL_ROOT or str(request.base_url))


# -----------------------------------------------------------------------------
# Resource HATEOAS
# -----------------------------------------------------------------------------
def build_resource_links(url_builder: UrlBuilder, namespace: str, base: str, item_id: str) -> HATEOASLinks:
    return {
        "self": [HATEOASLink(href=url_builder(namespace, base, item_id))],
        "collection": [HATEOASLink(href=url_builder(namespace, base))],
    }
