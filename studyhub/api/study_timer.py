"""
Study Timer API Endpoints

Each browser page view opens its own timer view, drives it through the
transition endpoints and listens to its event stream. Closing the view
tears the timer down.
"""
import logging
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from studyhub import config
from studyhub.infra.supabase.client import get_supabase_client
from studyhub.infra.supabase.repositories import RepositoryFactory
from studyhub.middleware.auth import get_current_user_id
from studyhub.models.study_session import StudySession, TodayStats
from studyhub.services.study_timer import (
    DurationValidationError,
    InvalidTransitionError,
    NotificationPermission,
    StatsAggregator,
    StudyTimer,
    SupabaseSessionGateway,
    TimerRegistry,
    TimerSnapshot,
    TimerView,
    ViewNotFoundError,
)
from studyhub.services.study_timer.notifications import SupabasePushNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/study-timer", tags=["study-timer"])

_registry: Optional[TimerRegistry] = None


def build_default_registry() -> TimerRegistry:
    """Registry wired to Supabase for persistence and push notifications"""
    repositories = RepositoryFactory(get_supabase_client())
    return TimerRegistry(
        gateway=SupabaseSessionGateway(repositories.study_sessions),
        notifier_factory=lambda user_id: SupabasePushNotifier(repositories.push_notifications, user_id),
    )


def get_timer_registry() -> TimerRegistry:
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry


async def shutdown_timer_registry():
    """Tear down every open view (application shutdown)"""
    global _registry
    if _registry is not None:
        await _registry.close_all()
        _registry = None


def get_stats_aggregator() -> StatsAggregator:
    repositories = RepositoryFactory(get_supabase_client())
    return StatsAggregator(repositories.study_sessions, config.get_daily_goal_minutes())


class OpenViewResponse(BaseModel):
    view_id: str
    timer: TimerSnapshot


class DurationsRequest(BaseModel):
    """Durations in minutes as entered in the settings form"""
    work_minutes: int
    short_break_minutes: int
    long_break_minutes: int


class PermissionRequest(BaseModel):
    permission: NotificationPermission


def _get_view(view_id: str, user_id: str, registry: TimerRegistry) -> TimerView:
    try:
        return registry.get(view_id, user_id)
    except ViewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _transition(
    view_id: str,
    user_id: str,
    registry: TimerRegistry,
    operation: Callable[[StudyTimer], None],
) -> TimerSnapshot:
    view = _get_view(view_id, user_id, registry)
    try:
        operation(view.timer)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return view.timer.snapshot()


@router.post("/views", response_model=OpenViewResponse, status_code=201)
async def open_view(
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Open a timer for a new page view"""
    view = registry.create(user_id)
    return OpenViewResponse(view_id=view.view_id, timer=view.timer.snapshot())


@router.get("/views/{view_id}", response_model=TimerSnapshot)
async def get_view(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _get_view(view_id, user_id, registry).timer.snapshot()


@router.delete("/views/{view_id}", status_code=204)
async def close_view(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Page view ended: cancel the countdown and release the timer"""
    try:
        await registry.close(view_id, user_id)
    except ViewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/views/{view_id}/start", response_model=TimerSnapshot)
async def start_timer(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _transition(view_id, user_id, registry, lambda timer: timer.start())


@router.post("/views/{view_id}/pause", response_model=TimerSnapshot)
async def pause_timer(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _transition(view_id, user_id, registry, lambda timer: timer.pause())


@router.post("/views/{view_id}/toggle", response_model=TimerSnapshot)
async def toggle_timer(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _transition(view_id, user_id, registry, lambda timer: timer.toggle())


@router.post("/views/{view_id}/reset", response_model=TimerSnapshot)
async def reset_timer(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _transition(view_id, user_id, registry, lambda timer: timer.reset())


@router.post("/views/{view_id}/skip", response_model=TimerSnapshot)
async def skip_session(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    return _transition(view_id, user_id, registry, lambda timer: timer.skip())


@router.put("/views/{view_id}/durations", response_model=TimerSnapshot)
async def apply_durations(
    view_id: str,
    request: DurationsRequest,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Apply new durations; the current phase restarts idle at its new length"""
    view = _get_view(view_id, user_id, registry)
    try:
        view.timer.set_durations(
            request.work_minutes,
            request.short_break_minutes,
            request.long_break_minutes,
        )
    except DurationValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return view.timer.snapshot()


@router.put("/views/{view_id}/notification-permission")
async def report_permission(
    view_id: str,
    request: PermissionRequest,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Browser reports its current Notification.permission value"""
    view = _get_view(view_id, user_id, registry)
    view.permission.update(request.permission)
    return {"permission": view.permission.query().value}


@router.get("/views/{view_id}/events")
async def stream_events(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Server-sent events: snapshot, tone and permission-request"""
    view = _get_view(view_id, user_id, registry)
    return StreamingResponse(
        view.events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


@router.get("/stats/today", response_model=TodayStats)
async def get_today_stats(
    user_id: str = Depends(get_current_user_id),
    stats: StatsAggregator = Depends(get_stats_aggregator),
):
    try:
        return await stats.load_today_stats(user_id)
    except Exception as e:
        logger.error(f"Error loading stats for user {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load study stats: {str(e)}"
        )


@router.get("/sessions/recent", response_model=List[StudySession])
async def get_recent_sessions(
    limit: int = Query(5, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    stats: StatsAggregator = Depends(get_stats_aggregator),
):
    try:
        return await stats.load_recent_sessions(user_id, limit=limit)
    except Exception as e:
        logger.error(f"Error loading recent sessions for user {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load recent sessions: {str(e)}"
        )
