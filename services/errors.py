"""Caller-visible, non-retryable errors raised before any computation runs."""


class ValidationError(Exception):
    """Invalid request input (bad horizon, missing identifier)."""


class NotFoundError(Exception):
    """Unknown lease, property or landlord."""
