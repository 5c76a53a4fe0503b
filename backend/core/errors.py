from typing import List, Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Request data failed field checks. `detail` is the list of messages."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=self.errors)


class AuthRequiredError(HTTPException):
    def __init__(self, detail: str = "Username is required"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Item not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InternalError(HTTPException):
    """Store or unexpected failure. The detail never carries the cause."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
