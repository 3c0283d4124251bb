from fastapi import APIRouter, Depends
from api.dependencies import get_otp_service
from services.otp_service import OtpService
from utils.responses import no_store_json

router = APIRouter()

def _text(value, strip: bool = True) -> str:
    """Coerce a payload field to str. Emails are left unstripped so padded addresses fail validation."""
    if value is None:
        return ""
    text = str(value)
    return text.strip() if strip else text

@router.post("/send-otp")
async def send_otp(payload: dict, otp_service: OtpService = Depends(get_otp_service)):
    """Mail a fresh code for {email, type}; the code itself is never echoed back."""
    email = _text(payload.get("email"), strip=False)
    purpose = _text(payload.get("type"))
    return no_store_json(await otp_service.issue_code(email, purpose))

@router.post("/verify-otp")
async def verify_otp(payload: dict, otp_service: OtpService = Depends(get_otp_service)):
    email = _text(payload.get("email"), strip=False)
    code = _text(payload.get("code"))
    purpose = _text(payload.get("type"))
    return no_store_json(await otp_service.verify_code(email, code, purpose))
