"""
Error taxonomy for the job board client.

ValidationError and TransportError are raised by the gateway and turned
into notices by the store. PersistenceWarning is only ever logged.
"""

from typing import List, Optional


class JobBoardError(Exception):
    """Base class for job board client errors."""
    pass


class ValidationError(JobBoardError):
    """Raised when a job payload is missing required fields."""

    def __init__(self, errors: List[str], message: str = "Incomplete data to create the job"):
        self.errors = list(errors)
        super().__init__(f"{message}: {'; '.join(self.errors)}" if self.errors else message)


class TransportError(JobBoardError):
    """Raised when the backend is unreachable or answers without success."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PersistenceWarning(UserWarning):
    """Cache write failed. Never fatal."""
    pass
