# cancelflow/web/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateCancellationIn(BaseModel):
    """POST /cancellations body. Field checks live in the service."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    subscription_id: Optional[str] = Field(default=None, alias="subscriptionId")


class UpdateCancellationIn(BaseModel):
    """
    PUT /cancellations body. Only keys actually sent are applied,
    so ``model_fields_set`` decides what goes to the service.
    """
    model_config = ConfigDict(populate_by_name=True)

    cancellation_id: Optional[str] = Field(default=None, alias="cancellationId")
    reason: Optional[str] = None
    accepted_downsell: Optional[bool] = Field(default=None, alias="acceptedDownsell")

    @field_validator("accepted_downsell", mode="before")
    @classmethod
    def _truthy(cls, v: Any) -> bool:
        # any JSON value is accepted and read by truthiness
        return bool(v)

    def changes(self) -> dict:
        return {
            k: getattr(self, k)
            for k in ("reason", "accepted_downsell")
            if k in self.model_fields_set
        }


class CancellationCreatedOut(BaseModel):
    id: str
    downsell_variant: Literal["A", "B"]


class CancellationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    subscription_id: str
    downsell_variant: Literal["A", "B"]
    reason: Optional[str] = None
    accepted_downsell: bool = False
    created_at: datetime
