import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restopos.core.config import CORS_ORIGINS, ENV, SEED_DEMO_DATA
from restopos.core.database import engine
from restopos.core.errors import RestoPosError, StorageError
from restopos.core.logging_setup import configure_logging
from restopos.core.startup_checks import validate_runtime_environment
from restopos.middleware.observability import ObservabilityMiddleware
from restopos.services.container import build_services, seed_demo_data
from restopos.routers.auth import router as auth_router
from restopos.routers.tables import router as tables_router
from restopos.routers.menu import router as menu_router
from restopos.routers.transactions import router as transactions_router
from restopos.routers.reports import router as reports_router
from restopos.routers.users import router as users_router
from restopos.routers.settings import router as settings_router
from restopos.routers.backup import router as backup_router
from restopos.routers.sql_export import router as sql_export_router

configure_logging()

logger = logging.getLogger(__name__)


def _startup_tasks(app: FastAPI) -> None:
    validate_runtime_environment()
    services = build_services(engine)
    app.state.services = services
    logger.info("Services ready env=%s", ENV)
    if SEED_DEMO_DATA:
        try:
            seed_demo_data(services)
        except StorageError:
            logger.exception("Demo data seeding skipped: local store unavailable")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _startup_tasks(app)
    yield
    app.state.services = None


app = FastAPI(
    title="RestoPOS API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)


@app.exception_handler(RestoPosError)
async def restopos_error_handler(request: Request, exc: RestoPosError):
    if isinstance(exc, StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("Request rejected on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(auth_router)
app.include_router(tables_router)
app.include_router(menu_router)
app.include_router(transactions_router)
app.include_router(reports_router)
app.include_router(users_router)
app.include_router(settings_router)
app.include_router(backup_router)
app.include_router(sql_export_router)


@app.get("/")
def health():
    return {"status": "ok"}
