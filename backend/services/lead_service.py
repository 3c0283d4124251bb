import logging
import uuid
from datetime import datetime
from typing import Callable

from db.repository import Repository
from schemas.lead_schema import EnquiryCreate, RequirementCreate, LeadCreated

logger = logging.getLogger(__name__)


class LeadService:
    """Stores enquiries and workspace requirements submitted from the public site."""

    def __init__(self, repository: Repository, clock: Callable[[], datetime] = datetime.utcnow):
        self._repository = repository
        self._clock = clock

    async def _store(self, table: str, fields: dict) -> LeadCreated:
        now = self._clock()
        lead_id = str(uuid.uuid4())
        await self._repository.insert_row(table, {
            **fields,
            "id": lead_id,
            "status": "pending",
            "created_at": now,
            "updated_at": now,
        })
        logger.info(f"Stored {table} row {lead_id}")
        return LeadCreated(id=lead_id)

    async def submit_enquiry(self, enquiry: EnquiryCreate) -> LeadCreated:
        return await self._store("enquiries", enquiry.model_dump())

    async def submit_requirement(self, requirement: RequirementCreate) -> LeadCreated:
        return await self._store("requirements", requirement.model_dump())
