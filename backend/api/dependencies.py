from fastapi import Depends, HTTPException, status
from core.security import oauth2_scheme, verify_token
from core.config import settings
from db.repository import Repository, SQLRepository, MongoRepository
from db.session import SessionLocal
from db.mongodb import get_mongo_db
from services.otp_service import OtpService
from services.payment_service import PaymentOrderService
from services.admin_service import AdminService
from services.lead_service import LeadService
import logging

logger = logging.getLogger(__name__)

def get_repository() -> Repository:
    if settings.USE_MONGO:
        mdb = get_mongo_db()
        if mdb is None:
            raise HTTPException(status_code=500, detail="Mongo not available")
        return MongoRepository(mdb)
    return SQLRepository(SessionLocal)

def get_otp_service(repository: Repository = Depends(get_repository)) -> OtpService:
    return OtpService(repository, expiry_minutes=settings.OTP_EXPIRY_MINUTES)

def get_payment_service() -> PaymentOrderService:
    return PaymentOrderService(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        api_base=settings.RAZORPAY_API_BASE,
        default_currency=settings.DEFAULT_CURRENCY,
    )

def get_admin_service(repository: Repository = Depends(get_repository)) -> AdminService:
    return AdminService(repository)

def get_lead_service(repository: Repository = Depends(get_repository)) -> LeadService:
    return LeadService(repository)

async def admin_required(token: str = Depends(oauth2_scheme)) -> dict:
    payload = verify_token(token) if token else None
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return payload
