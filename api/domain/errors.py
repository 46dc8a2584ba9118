# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Exception family for program failures.

Domain operations report failures as tagged results; these exceptions exist
for callers that unwrap those results and for the persistence collaborator.
"""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Tags carried by failed workflow results."""
    VALIDATION = "validation-error"
    NOT_FOUND = "resource-not-found"
    FINAL_OUTCOME = "final-outcome"
    FINAL_STAGE = "final-stage"
    WRONG_STAGE = "wrong-stage"


class ProgramException(Exception):
    """Base class for program exceptions."""

    def __init__(self, message: str, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.error_type = error_type


class ValidationException(ProgramException):
    """Exception for eligibility and input validation failures."""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message, ErrorKind.VALIDATION.value)
        self.validation_errors = validation_errors or []


class DomainException(ProgramException):
    """Exception for illegal state transitions."""

    def __init__(self, message: str, error_kind: ErrorKind):
        super().__init__(message, error_kind.value)
        self.error_kind = error_kind


class NotFoundException(DomainException):
    """Exception for unknown participant identities."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.NOT_FOUND)


class ConflictException(ProgramException):
    """Exception for commits against a stale participant revision."""

    def __init__(self, message: str):
        super().__init__(message, "resource-conflict")
