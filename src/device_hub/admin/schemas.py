"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_secret: str = Field(alias="adminSecret")
