from typing import Optional

from pydantic import BaseModel


class Health(BaseModel):
    status: int
    status_message: str
    timestamp: str
    ip_address: str
    echo: Optional[str] = None
    path_echo: Optional[str] = None
    shipping_methods: Optional[int] = None  # registered method count
