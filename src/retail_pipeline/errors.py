# ========================
# src/retail_pipeline/errors.py
# ========================

"""
Pipeline Errors

Exception types raised (or recorded) by the cleaning stages.
"""

from typing import Any, Optional


class PipelineError(Exception):
    """Base class for all retail pipeline errors."""


class MalformedInputError(PipelineError):
    """
    A loaded record violates a field-type constraint.
    Fatal: the run is aborted before any cleaning stage starts.
    """

    def __init__(self, message: str, order_id: Any = None, field: Optional[str] = None):
        self.order_id = order_id
        self.field = field
        prefix = f"Order {order_id}: " if order_id is not None else ""
        super().__init__(f"{prefix}{message}")


class InsufficientDataError(PipelineError):
    """An aggregate (e.g. the discount mean) was requested over an empty set."""


class UnrecognizedDateFormatError(PipelineError):
    """
    A raw date string matched no known literal.
    Non-fatal: the Date Normalizer records it and sets the date to None.
    """

    def __init__(self, raw_value: Any, order_id: Any = None):
        self.raw_value = raw_value
        self.order_id = order_id
        super().__init__(f"Unrecognized date format {raw_value!r} (order {order_id})")
