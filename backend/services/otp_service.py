import logging
import re
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Any

from starlette.concurrency import run_in_threadpool

from core.exceptions import InvalidRequest, InvalidOrExpired, DeliveryFailure, InternalError
from db.repository import Repository
from utils.email import send_otp_email
from utils.timing import timeit

logger = logging.getLogger(__name__)

OTP_TABLE = "otp_codes"
OTP_PURPOSES = ("verification", "password_reset")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def generate_otp() -> str:
    """Six decimal digits, uniform over 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


class OtpService:
    """Issues and verifies one-time codes bound to (email, purpose)."""

    def __init__(
        self,
        repository: Repository,
        mailer: Callable[..., bool] = send_otp_email,
        clock: Callable[[], datetime] = datetime.utcnow,
        expiry_minutes: int = 10,
    ):
        self._repository = repository
        self._mailer = mailer
        self._clock = clock
        self._expiry_minutes = expiry_minutes

    @timeit("issue_otp")
    async def issue_code(self, email: str, purpose: str) -> Dict[str, Any]:
        if not email or not purpose:
            raise InvalidRequest("Email and type are required")
        if not EMAIL_PATTERN.match(email):
            raise InvalidRequest("Invalid email format")
        if purpose not in OTP_PURPOSES:
            raise InvalidRequest("Invalid OTP type")

        code = generate_otp()
        now = self._clock()
        expires_at = now + timedelta(minutes=self._expiry_minutes)

        # Supersede any outstanding code for this (email, purpose)
        superseded = await self._repository.update_rows(
            OTP_TABLE,
            {"email": email, "type": purpose, "used": False},
            {"used": True},
        )
        if superseded:
            logger.info(f"Invalidated {superseded} outstanding {purpose} code(s) for {email}")

        try:
            await self._repository.insert_row(OTP_TABLE, {
                "id": str(uuid.uuid4()),
                "email": email,
                "code": code,
                "type": purpose,
                "created_at": now,
                "expires_at": expires_at,
                "used": False,
            })
        except Exception as e:
            logger.error(f"Error storing OTP for {email}: {e}")
            raise InternalError("Failed to generate OTP") from e

        # The stored code stays valid even when delivery fails
        sent = await run_in_threadpool(self._mailer, email, code, purpose, self._expiry_minutes)
        if not sent:
            raise DeliveryFailure()

        logger.info(f"OTP sent to {email} for {purpose}")
        return {"success": True, "message": "OTP sent successfully"}

    @timeit("verify_otp")
    async def verify_code(self, email: str, code: str, purpose: str) -> Dict[str, Any]:
        if not email or not code or not purpose:
            raise InvalidRequest("Email, code, and type are required")

        candidates = await self._repository.select_rows(
            OTP_TABLE,
            where={"email": email, "code": code, "type": purpose, "used": False},
            gte={"expires_at": self._clock()},
            order_by="created_at",
            descending=True,
            limit=1,
        )
        if not candidates:
            logger.info(f"OTP not found or expired for {email}")
            raise InvalidOrExpired()

        # Conditional claim: only one caller can flip used from False to True
        claimed = await self._repository.update_rows(
            OTP_TABLE,
            {"id": candidates[0]["id"], "used": False},
            {"used": True},
        )
        if claimed != 1:
            logger.warning(f"OTP for {email} was claimed concurrently")
            raise InvalidOrExpired()

        logger.info(f"OTP verified for {email} ({purpose})")
        return {"success": True, "message": "OTP verified successfully"}
