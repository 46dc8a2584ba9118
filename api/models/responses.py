# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models returned by the program core.
"""

from typing import List
from pydantic import BaseModel, Field, model_validator


class EligibilityVerdict(BaseModel):
    """Outcome of an eligibility evaluation."""

    eligible: bool = Field(..., description="Whether the candidate may enter the program")
    reasons: List[str] = Field(default_factory=list, description="Every failing check, in evaluation order")

    @model_validator(mode='after')
    def validate_consistency(self):
        """A verdict is eligible exactly when no reason was recorded."""
        if self.eligible != (len(self.reasons) == 0):
            raise ValueError('eligible must be true if and only if reasons is empty')
        return self


class VulnerabilityTypeInfo(BaseModel):
    """Reference entry for a recognized vulnerability."""

    key: str = Field(..., description="Vulnerability identifier")
    label: str = Field(..., description="Display label")
