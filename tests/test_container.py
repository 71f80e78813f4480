"""Tests for container wiring."""

import asyncio

from club_scheduler.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.session_service.weekday == 2
    assert container.session_service.upcoming_count == 8
    assert container.receipt_intake.text_limit == settings.airtable_text_limit
    assert container.access_gate.allows("tennis2025")
    asyncio.run(container.close_resources())
