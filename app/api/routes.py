# app/api/routes.py
from fastapi import APIRouter
from . import activity, auth, enquiries, interests, properties, users
from ..utils import utcnow

router = APIRouter(prefix="/api")

@router.get("/health")
def health():
    return {"status": "ok", "timestamp": utcnow().isoformat()}

router.include_router(auth.router)
router.include_router(users.router)
router.include_router(properties.router)
router.include_router(enquiries.router)
router.include_router(interests.router)
router.include_router(activity.router)
