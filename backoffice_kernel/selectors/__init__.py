"""Selectors for the back-office kernel (read side)."""

from backoffice_kernel.selectors.record_selector import RecordSelector, chunked

__all__ = [
    "RecordSelector",
    "chunked",
]
