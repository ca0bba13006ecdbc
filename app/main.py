import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging_middleware import LoggingMiddleware
from app.db.init_db import init_db

from app.routers.classes import router as classes_router
from app.routers.departments import router as departments_router
from app.routers.enrollments import router as enrollments_router
from app.routers.subjects import router as subjects_router
from app.routers.users import router as users_router

logging.basicConfig(level=settings.log_level)

app = FastAPI(title=settings.app_name)

# Middleware
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(departments_router, prefix="/api/departments", tags=["departments"])
app.include_router(subjects_router, prefix="/api/subjects", tags=["subjects"])
app.include_router(classes_router, prefix="/api/classes", tags=["classes"])
app.include_router(enrollments_router, prefix="/api/enrollments", tags=["enrollments"])
