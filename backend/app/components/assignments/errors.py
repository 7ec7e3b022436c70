"""Exceptions raised by the assignment workflow.

Route handlers translate these into HTTP responses; the batch loop catches
``PerPairWriteError`` itself and never lets it escape.
"""

from __future__ import annotations


class AssignmentError(Exception):
    """Base class for assignment workflow errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AssignmentValidationError(AssignmentError):
    status_code = 400


class AssignmentNotFoundError(AssignmentError):
    status_code = 404


class AssignmentPermissionError(AssignmentError):
    status_code = 403


class AssignmentURLError(AssignmentError):
    status_code = 403


class BatchExhaustedError(AssignmentError):
    """Every (user, assessment) pair of a batch failed."""

    status_code = 500

    def __init__(self, message: str = "Failed to create any assignments", failures=None):
        super().__init__(message)
        self.failures = list(failures or [])


class PerPairWriteError(AssignmentError):
    """A write for a single (user, assessment) pair failed."""

    def __init__(self, user_id: str, assessment_id: str, stage: str, message: str):
        super().__init__(message)
        self.user_id = user_id
        self.assessment_id = assessment_id
        self.stage = stage


class IdentityProvisioningError(AssignmentError):
    """The identity provider refused or failed to create a login."""
