from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from strata.conf import Settings


class ApplicationOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    env: str = "development"
    proxy: bool = False
    subdomain_offset: int = Field(default=2, ge=0)
    proxy_ip_header: str = "X-Forwarded-For"
    max_ips_count: int = Field(default=0, ge=0)
    keys: list[str] | None = None
    silent: bool = False

    @field_validator("keys", mode="before")
    @classmethod
    def split_keys(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [key.strip() for key in value.split(",") if key.strip()]
        return value

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> ApplicationOptions:
        defaults = {k.lower(): v for k, v in dict(settings.get("app") or {}).items()}
        defaults = {k: v for k, v in defaults.items() if k in cls.model_fields}
        defaults.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(defaults)
