from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException
from api.dependencies import admin_required, get_admin_service
from core.config import settings
from core.security import create_access_token, verify_admin_password
from services.admin_service import AdminService
from utils.responses import no_store_json
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

# Path segment -> table name
LEAD_KINDS = {"enquiries": "enquiries", "requirements": "requirements"}

def _lead_table(kind: str) -> str:
    table = LEAD_KINDS.get(kind)
    if table is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return table

@router.post("/admin/login")
async def admin_login(payload: dict):
    password = payload.get("password") or ""
    if not isinstance(password, str) or not verify_admin_password(password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid admin password")
    token = create_access_token(
        data={"sub": "admin", "role": "admin"},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return no_store_json({"access_token": token, "token_type": "bearer"})

@router.get("/admin/bookings")
async def list_bookings(_: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.list_bookings())

@router.put("/admin/bookings/{booking_id}/status")
async def update_booking_status(booking_id: str, payload: dict, _: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.update_booking_status(booking_id, str(payload.get("status") or "").strip()))

@router.get("/admin/{kind}")
async def list_leads(kind: str, _: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.list_leads(_lead_table(kind)))

@router.put("/admin/{kind}/{lead_id}/status")
async def update_lead_status(kind: str, lead_id: str, payload: dict, _: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.update_lead_status(_lead_table(kind), lead_id, str(payload.get("status") or "").strip()))

@router.put("/admin/{kind}/{lead_id}")
async def update_lead(kind: str, lead_id: str, payload: dict, _: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.update_lead(_lead_table(kind), lead_id, payload))

@router.delete("/admin/{kind}/{lead_id}")
async def delete_lead(kind: str, lead_id: str, _: dict = Depends(admin_required), admin_service: AdminService = Depends(get_admin_service)):
    return no_store_json(await admin_service.delete_lead(_lead_table(kind), lead_id))
