"""drone-gcr - Drone plugin that builds, tags and pushes images to a container registry."""

__version__ = "1.0.0"

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .cli import main

__all__ = ["main"]
