"""Scrape specification documents.

A spec lists provider blocks; each block either names a connection or carries
inline credential placeholders, and may restrict the categories it scrapes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SpecBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class EnvVar(SpecBaseModel):
    """Credential placeholder: a literal value or the name of an environment variable."""

    value: str | None = None
    from_env: str | None = Field(default=None, alias="fromEnv")

    @model_validator(mode="after")
    def _single_source(self) -> Self:
        if self.value is not None and self.from_env is not None:
            raise ValueError("EnvVar accepts either 'value' or 'fromEnv', not both")
        return self

    def is_empty(self) -> bool:
        return not self.value and not self.from_env


class CategoryFilter(SpecBaseModel):
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)

    def allows(self, category: str) -> bool:
        name = category.lower()
        if self.include and name not in {entry.lower() for entry in self.include}:
            return False
        return name not in {entry.lower() for entry in self.exclude}


class AzureSpec(CategoryFilter):
    connection: str | None = None
    subscription_id: str = Field(alias="subscriptionID")
    tenant_id: str | None = Field(default=None, alias="tenantID")
    client_id: EnvVar = Field(default_factory=EnvVar, alias="clientID")
    client_secret: EnvVar = Field(default_factory=EnvVar, alias="clientSecret")


class AWSSpec(CategoryFilter):
    connection: str | None = None
    regions: list[str] = Field(default_factory=lambda: ["us-east-1"], alias="region")
    endpoint: str | None = None
    assume_role: str | None = Field(default=None, alias="assumeRole")
    skip_tls_verify: bool = Field(default=False, alias="skipTLSVerify")
    access_key: EnvVar = Field(default_factory=EnvVar, alias="accessKey")
    secret_key: EnvVar = Field(default_factory=EnvVar, alias="secretKey")


class ScraperSpec(SpecBaseModel):
    azure: list[AzureSpec] = Field(default_factory=list)
    aws: list[AWSSpec] = Field(default_factory=list)

    def serialize(self) -> str:
        """Canonical JSON: sorted keys, compact separators, unset values dropped."""

        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_serialized(cls, value: str) -> ScraperSpec:
        return cls.model_validate_json(value)

    def provider_kinds(self) -> tuple[str, ...]:
        return tuple(kind for kind in ("azure", "aws") if getattr(self, kind))

    def generate_name(self, prefix: str = "") -> str:
        """Name derived from the spec digest, led by ``prefix`` or the provider kinds."""

        digest = hashlib.sha256(self.serialize().encode("utf-8")).hexdigest()[:12]
        if prefix.endswith(f"-{digest}"):
            return prefix
        lead = prefix or "-".join(self.provider_kinds()) or "empty"
        return f"{lead}-{digest}"
