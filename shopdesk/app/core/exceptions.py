"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to and a message that is safe to
show to the user. ``main.py`` turns them into ``{"error": message}``.
"""

from __future__ import annotations


class ShopdeskError(Exception):
    """Base exception for all service failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ShopdeskError):
    """Raised when input is missing or malformed."""

    status_code = 400


class NotFoundError(ShopdeskError):
    """Raised when no record matches the requested id."""

    status_code = 404


class InsufficientStockError(ShopdeskError):
    """Raised when a sell would take a product's quantity below zero."""

    status_code = 400


class InvalidAmountError(ShopdeskError):
    """Raised when a payment amount is not a finite positive number."""

    status_code = 400


class UnexpectedError(ShopdeskError):
    """Raised when persistence or IO fails underneath a service call."""

    status_code = 500
