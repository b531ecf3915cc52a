from pydantic import BaseModel, Field


class ErrorData(BaseModel):
    status: int


class ErrorResponse(BaseModel):
    """Body of every error returned by the API."""
    code: str = Field(
        ...,
        description="Machine readable error code"
    )
    message: str = Field(
        ...,
        description="Human readable error message"
    )
    data: ErrorData
