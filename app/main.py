# app/main.py
import os
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.db import Base, engine, SessionLocal
import app.models  # noqa: F401 ensure models are imported so tables are known
from app.activity import activity_logger
from app.api.routes import router as api_router
from app.auction import reconcile_auction_statuses
from app.scheduler import start_scheduler, shutdown_scheduler
from app.services import ensure_admin_user
from app.utils import logger

# create FastAPI instance
app = FastAPI(title="DreamBid API")
app.include_router(api_router)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Something went wrong"})


def _ensure_admin():
    email, password = os.getenv("ADMIN_EMAIL"), os.getenv("ADMIN_PASSWORD")
    if not (email and password):
        return
    db = SessionLocal()
    try:
        ensure_admin_user(db, email, password, os.getenv("ADMIN_NAME", "Admin User"))
    except Exception as e:
        db.rollback()
        logger.error("Admin user setup skipped: %s", e)
    finally:
        db.close()


@app.on_event("startup")
def on_startup():
    # Ensure database tables are created on startup
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        # Do not crash the app if the database is not reachable yet
        logger.error("Database initialization error: %s", e)
    _ensure_admin()
    reconcile_auction_statuses()
    start_scheduler()


@app.on_event("shutdown")
def on_shutdown():
    shutdown_scheduler()
    activity_logger.shutdown()
