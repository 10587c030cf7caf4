"""
Error types raised by diffevo.
"""
from typing import List, Optional


class DiffEvoError(Exception):
    """Base exception class for all diffevo errors."""

    def __init__(self, message: str, *args):
        self.message = message
        super().__init__(message, *args)


class ConfigurationError(DiffEvoError):
    """Raised when run parameters, bounds or strategies are invalid."""
    pass


class EvaluationError(DiffEvoError):
    """A single objective function call failed."""

    def __init__(self, message: str, worker: Optional[int] = None):
        super().__init__(message)
        self.worker = worker


class BatchFailure(DiffEvoError):
    """Every individual of an evaluation batch failed."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])
