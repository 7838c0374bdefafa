# routers/health.py
from fastapi import APIRouter

import envelopes

router = APIRouter(
    prefix="/api",
    tags=["Health"],
)

@router.get("/health")
async def health():
    return envelopes.success({"status": "ok"}, "Service is healthy")
