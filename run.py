"""Entry point: `uvicorn run:app`."""

from aymur.app import app

__all__ = ["app"]
