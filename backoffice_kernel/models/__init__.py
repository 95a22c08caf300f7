"""ORM models for the backoffice kernel."""

from backoffice_kernel.models.key_value import KeyValueEntry

__all__ = ["KeyValueEntry"]
