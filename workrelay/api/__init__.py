"""HTTP ingress for Workrelay (FastAPI)."""

from workrelay.api.server import create_app

__all__ = ["create_app"]
