from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.hateoas import HATEOASLinks


# -----------------------------------------------------------------------------
# Pydantic Models
# -----------------------------------------------------------------------------
class ShippingMethod(BaseModel):
    """Registered shipping method. Immutable once registered."""
    id: str = Field(
        ...,
        min_length=1,
        description="Unique method identifier (e.g. 'flat_rate')"
    )
    title: str = Field(
        ...,
        description="Shipping method title"
    )
    description: str = Field(
        "",
        description="Shipping method description"
    )

    model_config = ConfigDict(frozen=True, from_attributes=True)


class ShippingMethodRead(BaseModel):
    """
    Shipping method as returned by the API.

    Base fields are only set when visible in the requested context, and
    extension fields are carried as extra attributes.
    """
    id: Optional[str] = Field(
        None,
        description="Method ID."
    )
    title: Optional[str] = Field(
        None,
        description="Shipping method title."
    )
    description: Optional[str] = Field(
        None,
        description="Shipping method description."
    )
    links: HATEOASLinks = Field(
        default_factory=dict,
        alias="_links",
        description="HATEOAS links."
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)
