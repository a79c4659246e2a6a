"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the academic records backend.
Controllers are intentionally thin: they parse the request body, delegate
to services, and return JSON responses.

Endpoints implemented:
- POST /api/students
- POST /api/faculty
- GET /api/stats
- GET /api/enrollments/recent

Any other path under /api answers 404 with a JSON error; every other
path is a front-end route and gets a static file or the app shell.
"""

from contextlib import asynccontextmanager
import json
import logging
import time
import uuid

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from pydantic import ValidationError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import schemas, services
from .config import Settings, settings as default_settings
from .database import RecordStore, get_session, get_store
from .errors import RouteNotFound, StoreError
from .migrations import create_schema
from .seed import seed_if_empty

logger = logging.getLogger("academia.api")

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store, create the schema, seed, and dispose on shutdown.

    A schema failure propagates and aborts startup.
    """
    cfg: Settings = app.state.settings
    store = RecordStore(cfg.DATABASE_URL)
    try:
        create_schema(store)
        if cfg.SEED_ON_STARTUP:
            seed_if_empty(store)
    except Exception:
        logger.exception("database initialisation failed, refusing to start")
        store.dispose()
        raise
    app.state.store = store
    logger.info("--- ACADEMIA SYSTEM READY AT http://%s:%s ---", cfg.HOST, cfg.PORT)
    try:
        yield
    finally:
        store.dispose()


async def _read_payload(request: Request, schema):
    """Parse a JSON or form-encoded body into `schema`.

    Raises HTTPException(400) for bodies that are not an object or whose
    values cannot be coerced.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data = {k: v for k, v in form.items() if isinstance(v, str)}
    else:
        raw = await request.body()
        if not raw.strip():
            data = {}
        else:
            try:
                data = json.loads(raw)
            except ValueError:
                raise HTTPException(status_code=400, detail="request body must be JSON or form data")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="request body must be an object")
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise HTTPException(status_code=400, detail=errors)


async def student_payload(request: Request) -> schemas.StudentIn:
    return await _read_payload(request, schemas.StudentIn)


async def faculty_payload(request: Request) -> schemas.FacultyIn:
    return await _read_payload(request, schemas.FacultyIn)


def create_app(cfg: Settings = None) -> FastAPI:
    """Build the application for `cfg` (the environment settings by default)."""
    cfg = cfg or default_settings
    if not logging.getLogger().handlers:
        logging.basicConfig(level=cfg.LOG_LEVEL)

    app = FastAPI(title="Academia Records API", lifespan=lifespan)
    app.state.settings = cfg

    # Wide-open CORS so a front end served from another origin can call the API in dev.
    if cfg.ALLOW_DEV_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        request.state.request_id = req_id
        started = time.perf_counter()
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = req_id
        if request.url.path.startswith("/api"):
            elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
            logger.info(
                "request_done %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "status_code": response.status_code,
                        "duration_ms": elapsed_ms,
                    },
                    ensure_ascii=True,
                ),
            )
        return response

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.kind.value, exc.message)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(RouteNotFound)
    async def route_not_found_handler(request: Request, exc: RouteNotFound):
        return JSONResponse(status_code=404, content={"error": "API route not found"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.post("/api/students", response_model=schemas.CreatedOut)
    def create_student(payload: schemas.StudentIn = Depends(student_payload), db: Session = Depends(get_session)):
        """Save a student; avatar initials and colour are derived here."""
        svc = services.StudentService(db)
        return svc.create(**payload.model_dump())

    @app.post("/api/faculty", response_model=schemas.CreatedOut)
    def create_faculty(payload: schemas.FacultyIn = Depends(faculty_payload), db: Session = Depends(get_session)):
        """Save a faculty member with a generated avatar URL."""
        svc = services.FacultyService(db)
        return svc.create(**payload.model_dump())

    @app.get("/api/stats", response_model=schemas.StatsOut)
    async def get_stats(store: RecordStore = Depends(get_store)):
        """Return dashboard counters; fails as a whole if any count fails."""
        return await services.StatsService(store).get_stats()

    @app.get("/api/enrollments/recent", response_model=schemas.RecentEnrollmentsOut)
    def recent_enrollments(db: Session = Depends(get_session)):
        """Return the five most recently created students, newest first."""
        return {"data": services.EnrollmentService(db).recent()}

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    def fallback(full_path: str, request: Request):
        """Serve front-end routes; unmatched API paths get a JSON 404."""
        if request.url.path.startswith("/api"):
            raise RouteNotFound(request.url.path)
        static_dir = cfg.STATIC_DIR.resolve()
        if full_path:
            candidate = (static_dir / full_path).resolve()
            if candidate.is_file() and static_dir in candidate.parents:
                return FileResponse(candidate)
        index = static_dir / "index.html"
        if not index.is_file():
            logger.warning("application shell missing at %s", index)
            return HTMLResponse("<!DOCTYPE html><title>Academia</title>", status_code=404)
        return FileResponse(index)

    return app


app = create_app()
