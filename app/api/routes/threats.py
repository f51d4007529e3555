"""Threat scan routes."""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user_id, get_store, get_threat_service
from app.models.threat import ThreatScan, ThreatScanRequest
from core.pipeline.services import ThreatScanService
from core.storage.repositories import Store

router = APIRouter()


@router.post("/scan")
async def scan_content(
    request: ThreatScanRequest,
    user_id: str = Depends(get_current_user_id),
    service: ThreatScanService = Depends(get_threat_service),
) -> dict[str, ThreatScan]:
    """Scan a profile, message or URL for fraud indicators."""
    scan = await service.scan(user_id, request.scan_type, request.content)
    return {"scan": scan}


@router.get("/", response_model=list[ThreatScan])
async def list_scans(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> list[ThreatScan]:
    """List the caller's scans, newest first."""
    return await store.scans.list_for_user(user_id)
