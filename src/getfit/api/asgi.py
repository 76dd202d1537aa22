"""ASGI entrypoint for the GetFit tracker API."""

from getfit.api.app import create_app
from getfit.containers import build_container

app = create_app(build_container())
