import logging
import asyncio
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
import certifi
from core.config import settings

logger = logging.getLogger(__name__)

_mongo_client: Optional[AsyncIOMotorClient] = None
_mongo_db: Optional[AsyncIOMotorDatabase] = None

def get_mongo_db() -> Optional[AsyncIOMotorDatabase]:
    global _mongo_client, _mongo_db
    if not settings.USE_MONGO:
        return None
    if _mongo_db is not None:
        return _mongo_db
    if not settings.MONGO_URI:
        logger.warning("USE_MONGO=true but MONGO_URI is not set")
        return None
    client_kwargs = {
        "serverSelectionTimeoutMS": 30000,
        "connectTimeoutMS": 20000,
        "socketTimeoutMS": 20000,
    }
    # Atlas / SRV endpoints need the CA bundle passed explicitly
    if "mongodb.net" in settings.MONGO_URI or settings.MONGO_URI.startswith("mongodb+srv://"):
        client_kwargs.update({
            "tls": True,
            "tlsCAFile": certifi.where(),
            "retryWrites": True,
        })
    if settings.MONGO_URI.startswith("mongodb+srv://"):
        client_kwargs["directConnection"] = False
    _mongo_client = AsyncIOMotorClient(settings.MONGO_URI, **client_kwargs)
    _mongo_db = _mongo_client[settings.MONGO_DB]
    return _mongo_db

async def init_mongo_indexes():
    db = get_mongo_db()
    if db is None:
        return
    # Retry to allow primary election / networking delays
    for attempt in range(1, 6):
        try:
            await db.command({"ping": 1})
            await db.otp_codes.create_index([("email", 1), ("type", 1), ("used", 1)], name="i_otp_email_type_used")
            await db.otp_codes.create_index("id", unique=True, name="u_otp_id")
            await db.bookings.create_index("id", unique=True, name="u_booking_id")
            await db.bookings.create_index("created_at", name="i_booking_created")
            await db.enquiries.create_index("id", unique=True, name="u_enquiry_id")
            await db.requirements.create_index("id", unique=True, name="u_requirement_id")
            await db.workspaces.create_index("id", unique=True, name="u_workspace_id")
            await db.profiles.create_index("user_id", unique=True, name="u_profile_user")
            return
        except Exception as e:
            wait_s = min(2 ** attempt, 15)
            logger.warning(f"Mongo not ready (attempt {attempt}): {e}; retrying in {wait_s}s")
            await asyncio.sleep(wait_s)
    logger.error("Mongo index initialization failed after retries")
