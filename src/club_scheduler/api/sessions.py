"""Session endpoints gated by the club passphrase."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from club_scheduler.api.models import (
    AssignPlayerRequest,
    AvailableDate,
    CreateSessionRequest,
    OverviewResponse,
    ReceiptRequest,
    ResultsRequest,
    SignupRequest,
    TeamSheetResponse,
    session_view,
    warning_view,
)
from club_scheduler.domain.results import available_players
from club_scheduler.domain.schedule import format_long_date
from club_scheduler.services.receipts import ReceiptUpload, decode_upload_text

if TYPE_CHECKING:
    from club_scheduler.containers import AppContainer
    from club_scheduler.services.sessions import SessionService


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_member(
    request: Request,
    x_club_passphrase: str | None = Header(default=None),
) -> None:
    """Ensure requests carry the shared club passphrase."""
    if not _container(request).access_gate.allows(x_club_passphrase):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/sessions", tags=["sessions"], dependencies=[Depends(require_member)]
)


def _overview(service: SessionService, changed: bool | None = None) -> OverviewResponse:
    overview = service.overview()
    return OverviewResponse(
        today=overview.today,
        current=[session_view(session, overview.today) for session in overview.current],
        archived=[
            session_view(session, overview.today) for session in overview.archived
        ],
        warnings=[warning_view(warning) for warning in overview.warnings],
        changed=changed,
    )


@router.get("")
async def list_sessions(request: Request) -> OverviewResponse:
    """Reload every session and split into current and archived."""
    service = _container(request).session_service
    await service.refresh()
    return _overview(service)


@router.get("/available-dates")
async def available_dates(request: Request) -> dict[str, list[AvailableDate]]:
    """Return upcoming dates that can still be organized."""
    service = _container(request).session_service
    await service.refresh()
    return {
        "dates": [
            AvailableDate(date=value, label=format_long_date(value))
            for value in service.available_dates()
        ]
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: CreateSessionRequest, request: Request
) -> OverviewResponse:
    """Post a new session; the organizer is signed up first."""
    service = _container(request).session_service
    await service.create_session(
        payload.date, payload.time, payload.organizer, payload.courts
    )
    return _overview(service, changed=True)


@router.delete("/{session_id}")
async def delete_session(session_id: str, request: Request) -> OverviewResponse:
    service = _container(request).session_service
    await service.delete_session(session_id)
    return _overview(service, changed=True)


@router.post("/{session_id}/signups")
async def sign_up(
    session_id: str, payload: SignupRequest, request: Request
) -> OverviewResponse:
    """Sign a player up; extra players land on the waiting list."""
    service = _container(request).session_service
    changed = await service.sign_up(session_id, payload.player)
    return _overview(service, changed=changed)


@router.delete("/{session_id}/signups/{player:path}")
async def cancel_signup(
    session_id: str, player: str, request: Request
) -> OverviewResponse:
    service = _container(request).session_service
    changed = await service.cancel_signup(session_id, player)
    return _overview(service, changed=changed)


@router.post("/{session_id}/team-sheet")
async def assign_player(
    session_id: str, payload: AssignPlayerRequest, request: Request
) -> TeamSheetResponse:
    """Place a player on a draft team sheet without saving it."""
    service = _container(request).session_service
    await service.refresh()
    session = service.store.get(session_id)
    sheet = payload.to_sheet().assign_player(payload.team, payload.slot, payload.player)
    return TeamSheetResponse(
        teams=list(sheet.teams),
        available_players=available_players(session, sheet),
    )


@router.put("/{session_id}/results")
async def record_results(
    session_id: str, payload: ResultsRequest, request: Request
) -> OverviewResponse:
    """Save teams and round-robin scores for a session."""
    service = _container(request).session_service
    await service.record_results(session_id, payload.to_sheet(), payload.to_scores())
    return _overview(service, changed=True)


@router.put("/{session_id}/receipts/{court}")
async def attach_receipt(
    session_id: str, court: int, payload: ReceiptRequest, request: Request
) -> OverviewResponse:
    """Attach a court receipt, recompressing images to fit the store."""
    container = _container(request)
    service = container.session_service
    upload = ReceiptUpload(
        filename=payload.filename,
        content_type=payload.content_type,
        data=decode_upload_text(payload.data),
    )
    encoded = container.receipt_intake.prepare(
        upload, confirm_truncation=payload.confirm
    )
    await service.attach_receipt(session_id, court, encoded)
    return _overview(service, changed=True)


@router.delete("/{session_id}/receipts/{court}")
async def remove_receipt(
    session_id: str, court: int, request: Request
) -> OverviewResponse:
    service = _container(request).session_service
    await service.remove_receipt(session_id, court)
    return _overview(service, changed=True)
