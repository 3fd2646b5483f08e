import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    persistence_exception_handler,
    validation_exception_handler,
)
from app.core.logging import configure_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, ping
from app.routes import friends, loans, send

configure_logging(debug=settings.DEBUG)
log = get_logger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION
)

origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(PyMongoError, persistence_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.on_event("startup")
async def startup_db_client():
    await connect_to_mongo()
    if not settings.ultramsg_configured:
        log.warning("ultramsg_not_configured", msg="WhatsApp sends will be skipped until configured")
    log.info("startup", cors_origins=origins, ultramsg_instance=settings.ULTRAMSG_INSTANCE or "NOT SET")


@app.on_event("shutdown")
async def shutdown_db_client():
    await close_mongo_connection()


@app.get("/")
async def root():
    return {"ok": True}


@app.get("/_health")
async def health():
    """Liveness plus MongoDB reachability."""
    try:
        mongo_ok = await ping()
    except PyMongoError as exc:
        log.warning("health_mongo_unreachable", error=str(exc))
        mongo_ok = False
    return {"status": "ok", "time": int(time.time() * 1000), "mongo": mongo_ok}


app.include_router(friends.router, prefix=settings.API_PREFIX)
app.include_router(loans.router, prefix=settings.API_PREFIX)
app.include_router(send.router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
