from __future__ import annotations


class InvalidInputException(Exception):
    """Configuration or input that cannot be used, detected before any search."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
