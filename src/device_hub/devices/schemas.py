"""Pydantic schemas for device endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from device_hub.audit.schemas import HistoryEntryResponse


class DeviceRegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enroll_id: str = Field(alias="enrollId")
    name: str
    value: str


class PowerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enroll_id: str = Field(alias="enrollId")


class DeviceTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enroll_id: str = Field(alias="enrollId")
    name: str


class DeviceResponse(BaseModel):
    id: int
    enroll_id: str
    name: str
    value: datetime
    power_state: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeviceStatusResponse(BaseModel):
    enroll_id: str
    power_state: bool
    value: datetime
    name: str

    model_config = {"from_attributes": True}


class DeviceOverviewResponse(BaseModel):
    device: DeviceResponse
    entries: list[HistoryEntryResponse]


class DeviceTokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
