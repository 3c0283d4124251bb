import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from core.exceptions import InvalidRequest, NotFound
from db.repository import Repository
from utils.timing import timeit

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
LEAD_STATUSES = ("pending", "process", "confirmed", "complete", "cancelled")

# Columns an admin may edit on each lead table
LEAD_EDITABLE_FIELDS = {
    "enquiries": (
        "full_name", "company", "email", "phone", "number_of_employees", "city",
        "seats", "workspace_name", "workspace_type", "message", "status",
    ),
    "requirements": (
        "name", "email", "phone", "city", "seats", "workspace_type", "message", "status",
    ),
}


class AdminService:
    """Back-office reads and updates for bookings, enquiries and requirements."""

    def __init__(self, repository: Repository, clock: Callable[[], datetime] = datetime.utcnow):
        self._repository = repository
        self._clock = clock

    # --------------- Bookings ---------------
    @timeit("admin_list_bookings")
    async def list_bookings(self) -> List[Dict[str, Any]]:
        bookings = await self._repository.select_rows("bookings", order_by="created_at", descending=True)

        workspace_ids = sorted({b["workspace_id"] for b in bookings if b.get("workspace_id")})
        user_ids = sorted({b["user_id"] for b in bookings if b.get("user_id")})

        workspaces = {}
        if workspace_ids:
            for w in await self._repository.select_rows("workspaces", where={"id": workspace_ids}):
                workspaces[w["id"]] = {"name": w.get("name"), "location": w.get("location")}
        profiles = {}
        if user_ids:
            for p in await self._repository.select_rows("profiles", where={"user_id": user_ids}):
                profiles[p["user_id"]] = {
                    "user_id": p["user_id"],
                    "name": p.get("name"),
                    "email": p.get("email"),
                    "phone": p.get("phone"),
                }

        result = []
        for booking in bookings:
            row = dict(booking)
            row["workspace"] = workspaces.get(booking.get("workspace_id"))
            row["profile"] = profiles.get(booking.get("user_id"))
            result.append(row)
        logger.info(f"Fetched {len(result)} bookings")
        return result

    async def update_booking_status(self, booking_id: str, status: str) -> Dict[str, Any]:
        if not booking_id or not status:
            raise InvalidRequest("bookingId and status are required")
        if status not in BOOKING_STATUSES:
            raise InvalidRequest(f"Invalid status '{status}'")
        updated = await self._repository.update_rows(
            "bookings", {"id": booking_id}, {"status": status, "updated_at": self._clock()}
        )
        if not updated:
            raise NotFound("Booking not found")
        logger.info(f"Updated booking {booking_id} to status: {status}")
        return {"success": True}

    # --------------- Enquiries / requirements ---------------
    @staticmethod
    def _check_table(table: str):
        if table not in LEAD_EDITABLE_FIELDS:
            raise NotFound(f"Unknown collection '{table}'")

    @timeit("admin_list_leads")
    async def list_leads(self, table: str) -> List[Dict[str, Any]]:
        self._check_table(table)
        rows = await self._repository.select_rows(table, order_by="created_at", descending=True)
        logger.info(f"Fetched {len(rows)} {table}")
        return rows

    async def update_lead_status(self, table: str, lead_id: str, status: str) -> Dict[str, Any]:
        self._check_table(table)
        if not status:
            raise InvalidRequest("status is required")
        if status not in LEAD_STATUSES:
            raise InvalidRequest(f"Invalid status '{status}'")
        updated = await self._repository.update_rows(
            table, {"id": lead_id}, {"status": status, "updated_at": self._clock()}
        )
        if not updated:
            raise NotFound()
        logger.info(f"Updated {table} {lead_id} to status: {status}")
        return {"success": True}

    async def update_lead(self, table: str, lead_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self._check_table(table)
        if not isinstance(data, dict):
            raise InvalidRequest("data must be an object")
        allowed = LEAD_EDITABLE_FIELDS[table]
        values = {k: v for k, v in data.items() if k in allowed}
        if not values:
            raise InvalidRequest("No editable fields supplied")
        if "status" in values and values["status"] not in LEAD_STATUSES:
            raise InvalidRequest(f"Invalid status '{values['status']}'")
        values["updated_at"] = self._clock()
        updated = await self._repository.update_rows(table, {"id": lead_id}, values)
        if not updated:
            raise NotFound()
        logger.info(f"Updated {table} {lead_id}")
        return {"success": True}

    async def delete_lead(self, table: str, lead_id: str) -> Dict[str, Any]:
        self._check_table(table)
        deleted = await self._repository.delete_rows(table, {"id": lead_id})
        if not deleted:
            raise NotFound()
        logger.info(f"Deleted {table} {lead_id}")
        return {"success": True}
