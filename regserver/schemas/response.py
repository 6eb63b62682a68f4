from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class RegistrationResponse(BaseModel):
    """
    Returned by a successful registration.
    """
    message: str = "User created successfully"
    user_id: str
