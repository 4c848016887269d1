import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.logging import setup_logging
from app.api.routes.tickets import router as tickets_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.profiles import router as profiles_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# 1) Create the app FIRST
app = FastAPI(title="Property Desk API")

# 2) Add CORS Middleware BEFORE routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3) Include routers AFTER app is created
app.include_router(tickets_router)
app.include_router(notifications_router)
app.include_router(profiles_router)

# 4) Health check endpoints
@app.get("/health")
def health():
    return {"ok": True, "service": "backend", "env": settings.ENV}

@app.get("/db-health")
def db_health():
    db = SessionLocal()
    try:
        db.execute(text("select 1"))
        return {"ok": True, "db": "connected"}
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return {"ok": False, "db": "unreachable"}
    finally:
        db.close()
