"""
Base schemas with common functionality.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common functionality for all schemas"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )


class ErrorResponse(BaseSchema):
    """Body returned for every rejected request"""
    success: bool = False
    error: str
