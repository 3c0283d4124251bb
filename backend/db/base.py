from db.session import Base, engine
from db.models.otp_code import OtpCode
from db.models.workspace import Workspace
from db.models.profile import Profile
from db.models.booking import Booking
from db.models.enquiry import Enquiry
from db.models.requirement import Requirement
import logging
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

async def initialize_database(bind: AsyncEngine = None):
    """Create tables only. Existing tables are left untouched."""
    target = bind or engine
    try:
        assert isinstance(target, AsyncEngine)
        async with target.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise e
