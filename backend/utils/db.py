import logging
from sqlalchemy.exc import IntegrityError, DBAPIError
from core.exceptions import InvalidRequest, InternalError

logger = logging.getLogger(__name__)


async def safe_commit(session, client_error_message: str = "Invalid request", server_error_message: str = "Internal server error"):
    """Commit, rolling back and translating driver errors into AppErrors."""
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Integrity error on commit: {e}")
        raise InvalidRequest(client_error_message) from e
    except DBAPIError as e:
        await session.rollback()
        logger.error(f"Database error on commit: {e}")
        raise InternalError(server_error_message) from e
