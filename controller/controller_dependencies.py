from fastapi import Request
from core.backend_client import BackendClient
from repository.job_repository import JobRepository
from service.poll_scheduler import PollScheduler
from util.enums import ErrorMessage
from util.errors import AppError


def build_poll_scheduler(client: BackendClient, **options) -> PollScheduler:
    _repo = JobRepository(client)
    _scheduler = PollScheduler(_repo, **options)
    return _scheduler


def get_poll_scheduler(request: Request) -> PollScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise AppError.of(ErrorMessage.SESSION_STOPPED)
    return scheduler


def require_running(request: Request) -> PollScheduler:
    """Manual triggers only make sense while the poll loop is live."""
    scheduler = get_poll_scheduler(request)
    if not scheduler.alive:
        raise AppError.of(ErrorMessage.SESSION_STOPPED)
    return scheduler
