"""Resolved build configuration shared by every pipeline step."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr

LATEST_TAG = "latest"


class PushStrategy(str, Enum):
    """How the push step publishes tags.

    ``repository`` pushes the bare repository once. Docker 20.10 and later
    only send ``:latest`` for a bare reference unless ``--all-tags`` is
    given (``DOCKER_PUSH_ALL_TAGS``). ``per-tag`` pushes each tag reference
    separately, so a failure can leave earlier tags published.
    """

    REPOSITORY = "repository"
    PER_TAG = "per-tag"


def tag_reference(repository: str, tag: str) -> str:
    """Full image reference for ``tag``; ``latest`` maps to the bare repository."""
    if tag == LATEST_TAG:
        return repository
    return f"{repository}:{tag}"


class BuildConfig(BaseModel):
    """Immutable build parameters for one plugin run."""

    model_config = ConfigDict(frozen=True)

    registry: str = Field(..., min_length=1, description="Registry host")
    storage_driver: str | None = Field(
        default=None, description="Engine storage driver override"
    )
    token: SecretStr = Field(..., description="Registry credential (JSON key)")
    repository: str = Field(..., min_length=1, description="Fully qualified repository")
    tags: tuple[str, ...] = Field(..., min_length=1, description="Tags, in push order")
    dockerfile: str = Field(default="Dockerfile", description="Dockerfile path")
    context: str = Field(default=".", description="Build context directory")
    commit_ref: str = Field(..., min_length=1, description="Local image name for the build")
    push_strategy: PushStrategy = Field(default=PushStrategy.REPOSITORY)

    def references(self) -> list[str]:
        return [tag_reference(self.repository, tag) for tag in self.tags]
