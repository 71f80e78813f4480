"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from club_scheduler.adapters.airtable_client import HttpxAirtableClient
from club_scheduler.adapters.airtable_session_repository import (
    AirtableSessionRepository,
)
from club_scheduler.config import Settings
from club_scheduler.services.access import AccessGate
from club_scheduler.services.receipts import ReceiptIntake
from club_scheduler.services.sessions import SessionService
from club_scheduler.services.store import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    receipt_intake: ReceiptIntake
    access_gate: AccessGate
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    airtable_client = HttpxAirtableClient.create(
        api_key=resolved_settings.airtable_api_key,
        base_id=resolved_settings.airtable_base_id,
        table_name=resolved_settings.airtable_table_name,
        base_url=resolved_settings.airtable_base_url,
        timeout=resolved_settings.airtable_timeout,
    )
    session_repository = AirtableSessionRepository(
        client=airtable_client,
        text_limit=resolved_settings.airtable_text_limit,
    )
    session_service = SessionService(
        repository=session_repository,
        store=SessionStore(),
        weekday=resolved_settings.weekday_index,
        upcoming_count=resolved_settings.upcoming_session_count,
        cutoff_hour=resolved_settings.same_day_cutoff_hour,
        timezone=resolved_settings.club_timezone,
    )
    receipt_intake = ReceiptIntake(
        max_bytes=resolved_settings.receipt_max_bytes,
        max_dimension=resolved_settings.receipt_max_dimension,
        jpeg_quality=resolved_settings.receipt_jpeg_quality,
        text_limit=resolved_settings.airtable_text_limit,
    )

    async def close_resources() -> None:
        await airtable_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        receipt_intake=receipt_intake,
        access_gate=AccessGate(resolved_settings.access_passphrase),
        close_resources=close_resources,
    )
