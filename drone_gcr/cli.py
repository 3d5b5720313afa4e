"""Command-line entry point for the plugin."""

from __future__ import annotations

import logging

import typer
from typing_extensions import Annotated

from . import __version__
from .config import ConfigError, resolve_config
from .models import PushStrategy
from .publish import PublishError, publish
from .settings import BuildInfo, EngineSettings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="drone-gcr",
    help="Build a Docker image, tag it and push it to Google Container Registry.",
    add_completion=False,
)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"drone-gcr {__version__}")
        raise typer.Exit()


@app.command()
def run(
    repo: Annotated[
        str,
        typer.Option(
            "--repo",
            envvar="PLUGIN_REPO",
            help="Repository, either owner/name or fully qualified.",
        ),
    ] = "",
    token: Annotated[
        str,
        typer.Option(
            "--token",
            envvar="PLUGIN_TOKEN",
            help="Service account JSON key used as the registry password.",
            show_default=False,
        ),
    ] = "",
    registry: Annotated[
        str,
        typer.Option(
            "--registry",
            envvar=["PLUGIN_REGISTRY", "PLUGIN_REGISTER"],
            help="Registry host (default: gcr.io).",
        ),
    ] = "",
    storage_driver: Annotated[
        str,
        typer.Option(
            "--storage-driver",
            envvar="PLUGIN_STORAGE_DRIVER",
            help="Storage driver for the Docker daemon.",
        ),
    ] = "",
    tags: Annotated[
        list[str],
        typer.Option(
            "--tag",
            envvar="PLUGIN_TAG",
            help="Tag to apply; repeatable or comma separated (default: latest).",
        ),
    ] = [],
    dockerfile: Annotated[
        str,
        typer.Option("--file", envvar="PLUGIN_FILE", help="Dockerfile path."),
    ] = "Dockerfile",
    context: Annotated[
        str,
        typer.Option("--context", envvar="PLUGIN_CONTEXT", help="Build context."),
    ] = ".",
    commit: Annotated[
        str,
        typer.Option(
            "--commit",
            envvar="DRONE_COMMIT",
            help="Commit SHA, used as the local image name during the build.",
        ),
    ] = "",
    push_strategy: Annotated[
        PushStrategy,
        typer.Option(
            "--push-strategy",
            envvar="PLUGIN_PUSH_STRATEGY",
            help="Push the bare repository once, or each tag separately.",
        ),
    ] = PushStrategy.REPOSITORY,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Build, tag and push the image described by the plugin settings."""
    configure_logging(verbose)
    logger.info("Drone GCR plugin %s", __version__)

    build = BuildInfo()
    if build.build_number:
        logger.info(
            "Build #%s on %s at %s",
            build.build_number,
            build.branch or "-",
            build.commit or "-",
        )

    try:
        config = resolve_config(
            repo=repo,
            token=token,
            commit_ref=commit,
            registry=registry,
            storage_driver=storage_driver,
            tags=tags,
            dockerfile=dockerfile,
            context=context,
            push_strategy=push_strategy,
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc

    try:
        publish(config, EngineSettings())
    except PublishError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
