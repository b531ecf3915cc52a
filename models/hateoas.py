from pydantic import BaseModel

class HATEOASLink(BaseModel):
    href: str           # absolute URL


# relation name ("self", "collection") -> links for that relation
HATEOASLinks = dict[str, list[HATEOASLink]]
