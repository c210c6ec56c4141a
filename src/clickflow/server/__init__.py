"""HTTP adapter for clickflow."""

from clickflow.server.app import create_app

__all__ = ["create_app"]
