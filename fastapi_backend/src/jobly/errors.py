"""HTTP errors raised by the entity layer and the auth gates.

Each one renders as ``{"status": <code>, "message": <detail>}`` through the
application's exception handler.
"""
from typing import List, Union

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """No row exists for the requested key."""

    def __init__(self, entity: str) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


class ValidationFailedError(HTTPException):
    def __init__(self, message: Union[str, List[str]]) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class InvalidCredentialsError(HTTPException):
    """Login failure. Reported as 400, not 401."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid username or password.")


class ConflictError(HTTPException):
    """The row would clash with one that already exists."""

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
