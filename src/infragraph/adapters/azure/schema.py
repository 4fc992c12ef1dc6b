"""Pydantic models describing Azure Resource Manager payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ArmBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ArmResource(ArmBaseModel):
    id: str | None = None
    name: str | None = None
    type: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")


class ArmListPage(ArmBaseModel):
    value: list[dict[str, object]] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="nextLink")


class TokenResponse(ArmBaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None


class ArmErrorBody(ArmBaseModel):
    code: str = ""
    message: str = ""


class ArmErrorResponse(ArmBaseModel):
    error: ArmErrorBody
