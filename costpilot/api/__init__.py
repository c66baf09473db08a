"""HTTP API package."""

from costpilot.api.app import create_app

__all__ = ["create_app"]
