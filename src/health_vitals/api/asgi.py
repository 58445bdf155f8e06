"""ASGI entrypoint for the health vitals API."""

from health_vitals.api.app import create_app
from health_vitals.containers import build_container

app = create_app(build_container())
