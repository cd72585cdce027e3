"""
Error types shared by the persistence, enrichment and service layers.

Routers never build HTTP errors for these themselves; `main.py` registers one
exception handler per class.
"""

from __future__ import annotations


class ServiceError(RuntimeError):
    pass


class ValidationError(ServiceError):
    """
    Malformed id, pagination value or body, or an empty patch.
    """


class NotFoundError(ServiceError):
    def __init__(self, message: str = "Person not found", *, person_id: int | None = None) -> None:
        super().__init__(message)
        self.person_id = person_id


class StorageError(ServiceError):
    """
    Any persistence failure (connection, constraint, driver error).
    """

    def __init__(self, message: str, *, operation: str, person_id: int | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.person_id = person_id


# Predictor failures are expected; the service never lets them reach a caller.
class EnrichmentError(ServiceError):
    pass
