"""Configuration models and loading."""

import json
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_DIR = Path.home() / ".config" / "liveweb-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"

_STATUS_KEY = re.compile(r"^(\d{3})(?:-(\d{3}))?$")


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    prefix: str = "/proxy/"
    keep_alive_timeout: int = 5

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not (value.startswith("/") and value.endswith("/")) or value == "/":
            raise ValueError("prefix must start and end with '/', e.g. '/proxy/'")
        return value


class CorsSettings(BaseModel):
    # "any" disables the preflight origin check
    allowed_origins: list[str] | Literal["any"] = Field(
        default_factory=lambda: [
            "http://localhost:10001",
            "http://localhost:8000",
            "http://localhost:3000",
            "https://proxy-test.slax.dev",
        ]
    )

    def is_allowed(self, origin: str | None) -> bool:
        """Return False only when an allow-list is set and the origin is missing from it."""
        if self.allowed_origins == "any" or not self.allowed_origins or not origin:
            return True
        return origin in self.allowed_origins


class CacheSettings(BaseModel):
    ttl_by_status: dict[str, int] = Field(
        default_factory=lambda: {
            "200-299": 3600,
            "403": 0,
            "404": 1,
            "500-599": 0,
            "300-399": 10,
        }
    )

    @field_validator("ttl_by_status")
    @classmethod
    def _check_keys(cls, value: dict[str, int]) -> dict[str, int]:
        for key, ttl in value.items():
            match = _STATUS_KEY.match(key)
            if not match:
                raise ValueError(f"invalid status bucket {key!r}, expected 'NNN' or 'NNN-MMM'")
            if match.group(2) and int(match.group(2)) < int(match.group(1)):
                raise ValueError(f"invalid status range {key!r}")
            if ttl < 0:
                raise ValueError(f"negative ttl for {key!r}")
        return value

    def ttl_for(self, status: int) -> int | None:
        """Resolve a status code to its cache TTL in seconds.

        Exact codes win over ranges, so "404" beats "400-499".
        """
        ranged: int | None = None
        for key, ttl in self.ttl_by_status.items():
            low, _, high = key.partition("-")
            if not high:
                if int(low) == status:
                    return ttl
            elif ranged is None and int(low) <= status <= int(high):
                ranged = ttl
        return ranged


class FetchSettings(BaseModel):
    timeout: float | None = 300.0
    max_redirects: int = Field(default=20, ge=0)


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default
