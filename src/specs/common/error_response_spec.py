from pydantic import BaseModel, Field
from typing import Optional, Any

class ErrorResponse(BaseModel):
    message: str = Field(..., description="Error message")
    code: Optional[str] = Field(None, description="Application-specific error code")
    details: Optional[Any] = Field(None, description="Additional error details")
