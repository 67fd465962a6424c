"""ASGI application instance."""

from .factory import create_app

app = create_app()
