"""ASGI entrypoint for the calorie tracker API."""

from calorie_flow.api.app import create_app
from calorie_flow.containers import build_container

app = create_app(build_container())
