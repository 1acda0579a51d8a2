"""ASGI entrypoint for the shopping history service."""

from shopping_history.api.app import create_app
from shopping_history.containers import build_container

app = create_app(build_container())
