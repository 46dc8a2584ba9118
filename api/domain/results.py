# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Result containers shared by the domain operations.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import (
    ErrorKind,
    ValidationException,
    DomainException,
    NotFoundException
)


@dataclass
class ValidationResult:
    """Result of a precondition check."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None


@dataclass
class WorkflowResult:
    """Result of a program workflow operation."""
    success: bool
    record: Optional[Any] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    validation_errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, record: Any) -> "WorkflowResult":
        return cls(success=True, record=record)

    @classmethod
    def failure(
        cls,
        error_kind: ErrorKind,
        error_message: str,
        validation_errors: Optional[List[str]] = None
    ) -> "WorkflowResult":
        return cls(
            success=False,
            error_kind=error_kind,
            error_message=error_message,
            validation_errors=list(validation_errors or [])
        )

    @classmethod
    def from_validation(cls, validation: ValidationResult, message: str) -> "WorkflowResult":
        """Turn a failed precondition check into a failed workflow result."""
        if validation.error_kind is ErrorKind.VALIDATION:
            return cls.failure(ErrorKind.VALIDATION, message, validation.errors)
        return cls.failure(validation.error_kind, validation.errors[0])

    def unwrap(self) -> Any:
        """
        Return the record or raise the exception matching the failure.

        Raises:
            ValidationException: for validation failures
            NotFoundException: for unknown participants
            DomainException: for illegal state transitions
        """
        if self.success:
            return self.record

        if self.error_kind is ErrorKind.VALIDATION:
            raise ValidationException(self.error_message, self.validation_errors)
        if self.error_kind is ErrorKind.NOT_FOUND:
            raise NotFoundException(self.error_message)
        raise DomainException(self.error_message, self.error_kind)
