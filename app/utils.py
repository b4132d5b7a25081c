# app/utils.py
"""Shared utilities: the service logger, UTC clock and request metadata helpers."""
import os
import logging
import math
from datetime import datetime, timezone
from typing import Optional, Tuple
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("dreambid")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def request_meta(request) -> Tuple[Optional[str], Optional[str]]:
    """Return (ip_address, user_agent) for a Starlette request."""
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


def paginate(page: int, limit: int, total: int):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
