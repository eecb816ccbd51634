# transaction_api/schemas/simple.py
from pydantic import BaseModel, Field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class Health(BaseModel):
    status: str


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for successful responses: code 0, message "success", payload in data."""
    code: int = 0
    message: str = "success"
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    code: int
    message: str
    details: Optional[Dict[str, Any]] = Field(None, description="field name -> message for validation errors")
