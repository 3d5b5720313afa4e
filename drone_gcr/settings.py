from __future__ import annotations

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    value_lower = str(value).strip().lower()
    if value_lower in {"true", "1", "yes", "on"}:
        return True
    if value_lower in {"false", "0", "no", "off", ""}:
        return False
    return default


class EngineSettings(BaseSettings):
    """Knobs for the Docker engine that only come from the environment."""

    model_config = SettingsConfigDict(env_prefix="DOCKER_", case_sensitive=False)

    binary: str = "/usr/bin/docker"
    daemon_command: str = "daemon"
    launch_debug: bool = False
    login_email: str | None = None
    push_all_tags: bool = False

    @field_validator("launch_debug", "push_all_tags", mode="before")
    @classmethod
    def _lenient_bool(cls, value: Any) -> bool:
        return _parse_bool(value)


class BuildInfo(BaseSettings):
    """Build metadata Drone exports into every plugin container."""

    model_config = SettingsConfigDict(env_prefix="DRONE_", case_sensitive=False)

    build_number: str = ""
    commit: str = ""
    branch: str = ""
    tag: str = ""
