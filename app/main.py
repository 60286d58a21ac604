import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.classes.classes_router import router as classes_router
from app.api.v1.enrollments.router import router as enrollments_router
from app.api.v1.schedules.router import router as schedules_router
from app.api.v1.students.router import router as students_router
from app.api.v1.subjects.router import router as subjects_router
from app.api.v1.teachers.router import router as teachers_router
from app.core.config import settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name)

    # CORS: allow the dashboard frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info("%s %s - %s - %.3fs", request.method, request.url.path, response.status_code, process_time)
        return response

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "service": settings.app_name}

    # Routers
    app.include_router(classes_router)
    app.include_router(subjects_router)
    app.include_router(teachers_router)
    app.include_router(students_router)
    app.include_router(enrollments_router)
    app.include_router(schedules_router)

    return app


app = create_app()
