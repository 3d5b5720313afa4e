"""Resolve raw plugin options into a validated :class:`BuildConfig`."""

from __future__ import annotations

import logging
from typing import Iterable

from .models import LATEST_TAG, BuildConfig, PushStrategy

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "gcr.io"
DEFAULT_DOCKERFILE = "Dockerfile"
DEFAULT_CONTEXT = "."


class ConfigError(ValueError):
    """Raised when a required plugin option is missing."""


def qualify_repository(repo: str, registry: str) -> str:
    """Prefix ``owner/name`` short forms with the registry host.

    Anything with zero or several ``/`` separators is taken as already
    qualified and returned unchanged.

    Args:
        repo: Repository as supplied by the user
        registry: Registry host

    Returns:
        Repository path including the registry host
    """
    if repo.count("/") == 1:
        return f"{registry}/{repo}"
    return repo


def parse_tags(values: Iterable[str] | None) -> list[str]:
    """Flatten repeated and comma-separated tag values, defaulting to ``latest``.

    Args:
        values: Raw tag option values (``["v1,v2", "v3"]``)

    Returns:
        Ordered, non-empty list of tags
    """
    tags = [
        item.strip()
        for value in values or []
        for item in value.split(",")
        if item.strip()
    ]
    return tags or [LATEST_TAG]


def _require(value: str | None, option: str, env: str) -> str:
    if not value:
        raise ConfigError(f"Missing required option: {option} (set {env})")
    return value


def resolve_config(
    *,
    repo: str | None,
    token: str | None,
    commit_ref: str | None,
    registry: str | None = None,
    storage_driver: str | None = None,
    tags: Iterable[str] | None = None,
    dockerfile: str | None = None,
    context: str | None = None,
    push_strategy: PushStrategy = PushStrategy.REPOSITORY,
) -> BuildConfig:
    """Apply defaults and normalization to the raw plugin options."""
    registry = (registry or "").strip() or DEFAULT_REGISTRY
    repo = _require((repo or "").strip(), "repo", "PLUGIN_REPO")
    secret = _require((token or "").strip(), "token", "PLUGIN_TOKEN")
    commit = _require((commit_ref or "").strip(), "commit", "DRONE_COMMIT")

    config = BuildConfig(
        registry=registry,
        storage_driver=storage_driver or None,
        token=secret,
        repository=qualify_repository(repo, registry),
        tags=tuple(parse_tags(tags)),
        dockerfile=dockerfile or DEFAULT_DOCKERFILE,
        context=context or DEFAULT_CONTEXT,
        commit_ref=commit,
        push_strategy=push_strategy,
    )
    logger.debug(
        "Resolved repository %s with %d tag(s)", config.repository, len(config.tags)
    )
    return config
