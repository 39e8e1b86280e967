"""ASGI entrypoint for the label grader API."""

from label_grader.api.app import create_app
from label_grader.containers import build_container

app = create_app(build_container())
