from typing import Optional, Any

class RegServerError(Exception):
    """
    Base exception for the registration server.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class UserAlreadyExistsError(RegServerError):
    """
    Raised when a registration collides with an existing email or username.
    """
    def __init__(self, message: str = "User already exists", details: Optional[Any] = None):
        super().__init__(message, code="USER_ALREADY_EXISTS", status_code=409, details=details)

class StoreError(RegServerError):
    """
    Raised when the document store fails, times out or returns undecodable data.
    The underlying exception is chained as __cause__.
    """
    def __init__(self, message: str = "Document store error", details: Optional[Any] = None):
        super().__init__(message, code="STORE_ERROR", status_code=500, details=details)
