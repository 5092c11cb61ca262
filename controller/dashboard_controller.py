from fastapi import APIRouter, Depends
from model.api import DashboardState, FilterContext, Notification
from service.poll_scheduler import CycleOutcome, PollScheduler
from util.constants import InternalURIs
from util.enums import ErrorMessage
from util.errors import AppError
from controller.controller_dependencies import get_poll_scheduler, require_running

dashboard_router = APIRouter()


def _state_or_error(scheduler: PollScheduler, outcome: CycleOutcome) -> DashboardState:
    if not outcome.ok:
        raise AppError.of(ErrorMessage.BACKEND_UNAVAILABLE)
    return scheduler.state()


@dashboard_router.get(InternalURIs.DASHBOARD, response_model=DashboardState)
async def get_dashboard(
    scheduler: PollScheduler = Depends(get_poll_scheduler),
) -> DashboardState:
    return scheduler.state()


@dashboard_router.post(InternalURIs.REFRESH, response_model=DashboardState)
async def refresh(
    scheduler: PollScheduler = Depends(require_running),
) -> DashboardState:
    return _state_or_error(scheduler, await scheduler.refresh())


@dashboard_router.post(InternalURIs.LOAD_MORE, response_model=DashboardState)
async def load_more(
    scheduler: PollScheduler = Depends(require_running),
) -> DashboardState:
    if not scheduler.has_more:
        raise AppError.of(ErrorMessage.NO_MORE_JOBS)
    return _state_or_error(scheduler, await scheduler.load_more())


@dashboard_router.post(InternalURIs.FILTERS, response_model=DashboardState)
async def apply_filters(
    payload: FilterContext,
    scheduler: PollScheduler = Depends(require_running),
) -> DashboardState:
    return _state_or_error(scheduler, await scheduler.apply_filters(payload))


@dashboard_router.get(InternalURIs.NOTIFICATIONS, response_model=list[Notification])
async def notifications(
    scheduler: PollScheduler = Depends(get_poll_scheduler),
) -> list[Notification]:
    return scheduler.drain_notifications()
