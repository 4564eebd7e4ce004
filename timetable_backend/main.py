# timetable_backend/main.py
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timetable_backend.config import settings
from timetable_backend.database import Base, engine
from timetable_backend.logging_config import setup_logging
from timetable_backend.models import timetable as _timetable_models  # noqa: F401
from timetable_backend.models import user as _user_models  # noqa: F401
from timetable_backend.routers import auth, timetable
from timetable_backend.utils.errors import (
    ConflictError,
    InvalidTimeRangeError,
    MalformedTimeError,
    NotFoundError,
    PersistenceError,
)

setup_logging()
logger = logging.getLogger("app")


# 建立資料表（若不存在）
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Timetable Backend", version="1.0.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
        return response
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
        raise


@app.exception_handler(MalformedTimeError)
@app.exception_handler(InvalidTimeRangeError)
def _bad_time(_request: Request, exc: Exception):
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(ConflictError)
def _conflict(_request: Request, exc: ConflictError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": exc.message, "hasConflict": True},
    )


@app.exception_handler(NotFoundError)
def _not_found(_request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"success": False, "message": str(exc)})


@app.exception_handler(PersistenceError)
def _persistence_error(request: Request, exc: PersistenceError):
    logger.error("Persistence failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": str(exc), "error": repr(exc.__cause__ or exc)},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(timetable.router)


@app.get("/")
def root():
    return {"message": "Timetable backend is running!"}
