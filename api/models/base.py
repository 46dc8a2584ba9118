# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


def generate_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseEntity(BaseModel):
    """Base entity with common fields for all program records."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True
    )

    id: str = Field(default_factory=generate_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")
    created_by: Optional[str] = Field(None, description="User ID who created this record")
    updated_by: Optional[str] = Field(None, description="User ID who last updated this record")
    schema_version: int = Field(default=1, description="Schema version for migrations")

    def update_timestamp(self, updated_by: Optional[str], when: Optional[datetime] = None) -> None:
        """Update the timestamp and updated_by fields."""
        self.updated_at = when or utc_now()
        if updated_by is not None:
            self.updated_by = updated_by


class BaseEntityCreate(BaseModel):
    """Base model for record creation requests."""

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )
