"""ASGI entrypoint for the label analyzer API."""

from label_analyzer.api.app import create_app
from label_analyzer.containers import build_container

app = create_app(build_container())
