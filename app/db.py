# app/db.py
"""Database engine and session utilities.

Centralized SQLAlchemy engine creation and the session dependency used by
the FastAPI routes. Background jobs open their own sessions from
``SessionLocal``.
"""
import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL not set")

# Normalize SQLAlchemy URL scheme (SQLAlchemy 2.x doesn't accept 'postgres://')
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)


def _engine_options(url: str):
    if url.startswith("sqlite"):
        # scheduler and activity writer threads share the engine
        return {"connect_args": {"check_same_thread": False}}
    # tuned pool settings for cloud DB
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", 5)),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", 10)),
        "pool_pre_ping": True,
    }


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
