"""ASGI entrypoint for the club scheduler API."""

from club_scheduler.api.app import create_app
from club_scheduler.containers import build_container

app = create_app(build_container())
