"""HTTP API layer."""

from teampulse.api.app import create_app

__all__ = ["create_app"]
