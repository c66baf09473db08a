"""
Exceptions shared across CostPilot.

Storage exceptions live with the storage interface; everything the
engine, agents and HTTP layer raise is defined here.
"""

from typing import Optional


class CostPilotError(Exception):
    """Base exception for CostPilot."""
    pass


class InputValidationError(CostPilotError):
    """
    Budget input could not be normalized.

    The message is shown to the client verbatim, so it is phrased
    for the person filling in the form.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.message = message


class AIServiceError(CostPilotError):
    """The generative model failed and no fallback applies."""
    pass
