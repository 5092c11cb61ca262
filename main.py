import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from core.backend_client import BackendClient
from controller.controller_dependencies import build_poll_scheduler
from util.logger import init_logger


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    client = BackendClient(settings.BACKEND_BASE_URL)
    scheduler = build_poll_scheduler(client)
    fastApi.state.scheduler = scheduler
    await scheduler.start()
    print(f"{Color.BLUE}Polling {settings.BACKEND_BASE_URL}{Color.RESET}")

    try:
        yield
    finally:
        try:
            await scheduler.stop()
        finally:
            await client.aclose()
        print(f"{Color.RED}Dashboard Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Accept"],
)


@app.get("/healthz")
async def healthz():
    scheduler = getattr(app.state, "scheduler", None)
    return {"ok": True, "polling": bool(scheduler and scheduler.alive)}


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
