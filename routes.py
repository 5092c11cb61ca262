from fastapi import FastAPI
from controller.dashboard_controller import dashboard_router


def register_routes(app: FastAPI) -> None:
    """Register dashboard controllers here."""
    app.include_router(dashboard_router)
