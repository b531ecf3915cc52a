from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-04/schema#"


# -----------------------------------------------------------------------------
# Field / Resource schema
# -----------------------------------------------------------------------------
class FieldSchema(BaseModel):
    """Schema of a single response field, including the contexts it is visible in."""
    type: str = Field(
        ...,
        description="JSON type of the field (e.g. 'string', 'object')"
    )
    description: Optional[str] = Field(
        None,
        description="Human readable description of the field"
    )
    context: Optional[List[str]] = Field(
        None,
        description="Contexts the field is visible in; None means always visible"
    )
    readonly: Optional[bool] = Field(
        None,
        description="Whether the field is read only"
    )

    model_config = ConfigDict(frozen=True)

    def visible_in(self, context: str) -> bool:
        if self.context is None:
            return True
        return context in self.context


class ResourceSchema(BaseModel):
    """Machine-checkable shape of a resource item."""
    title: str
    properties: Dict[str, FieldSchema] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def contexts(self) -> List[str]:
        """Union of the contexts declared by any field, in declaration order."""
        seen: List[str] = []
        for field in self.properties.values():
            for context in field.context or []:
                if context not in seen:
                    seen.append(context)
        return seen

    def with_fields(self, fields: Dict[str, FieldSchema]) -> ResourceSchema:
        properties = dict(self.properties)
        properties.update(fields)
        return self.model_copy(update={"properties": properties})

    def to_json_schema(self) -> Dict[str, Any]:
        return {
            "$schema": JSON_SCHEMA_DRAFT,
            "title": self.title,
            "type": "object",
            "properties": {
                name: field.model_dump(exclude_none=True)
                for name, field in self.properties.items()
            },
        }


SHIPPING_METHOD_SCHEMA = ResourceSchema(
    title="shipping_method",
    properties={
        "id": FieldSchema(
            type="string",
            description="Method ID.",
            context=["view"],
        ),
        "title": FieldSchema(
            type="string",
            description="Shipping method title.",
            context=["view"],
        ),
        "description": FieldSchema(
            type="string",
            description="Shipping method description.",
            context=["view"],
        ),
    },
)
