from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
import uvicorn
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.log import log_api_error, log_api_request, log_system_event, setup_logging
from core.notifications import ChangeNotificationBus
from db.csv_import import import_csv_data
from db.database import async_session_maker, create_db_and_tables
from routers.audit_logs import router as audit_logs_router
from routers.inventory import router as inventory_router
from routers.logs import router as logs_router
from routers.report import router as report_router
from routers.updates import router as updates_router
from services.queries import count_inventory_items

setup_logging(settings.log_level, settings.log_dir)


async def seed_from_csv(csv_path: str) -> None:
    if not csv_path or not Path(csv_path).exists():
        return
    async with async_session_maker() as session:
        await import_csv_data(session, csv_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    await seed_from_csv(settings.csv_import_path)
    log_system_event(
        "Server started",
        host=settings.host,
        port=settings.port,
        environment=settings.environment,
    )
    yield


app = FastAPI(
    title="Stocklist Inventory API",
    description="Inventory items with an audit trail and live update events",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)
app.state.notifications = ChangeNotificationBus(count_inventory_items)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Client mistakes (400/404) are informational, not failures of the service
    if exc.status_code < 500:
        log_api_request(request, "Request rejected", status=exc.status_code, detail=exc.detail)
    else:
        log_api_error(request, getattr(exc, "cause", None) or exc, "Request failed")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body') or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    ]
    log_api_request(request, "Malformed request", errors=errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=jsonable_encoder({"detail": errors}))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log_api_error(request, exc, "Unhandled error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/api/health", tags=["health"])
async def health():
    return {"status": "ok"}


app.include_router(inventory_router, prefix="/api/inventory", tags=["inventory"])
app.include_router(audit_logs_router, prefix="/api/audit-logs", tags=["audit"])
app.include_router(report_router, prefix="/api/report", tags=["report"])
app.include_router(updates_router, prefix="/api/updates", tags=["updates"])
app.include_router(logs_router, prefix="/api/logs", tags=["logs"])

if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.environment == "development")
