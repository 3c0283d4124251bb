"""
Tests for the row-level repositories.
"""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from core.exceptions import InvalidOrExpired
from db.base import initialize_database
from db.repository import InMemoryRepository, MongoRepository, SQLRepository
from db.session import build_engine, build_session_factory
from services.otp_service import OtpService

T0 = datetime(2026, 1, 15, 9, 0, 0)


def _otp_row(row_id, email="user@example.com", code="123456", purpose="verification", minutes=0, used=False):
    created = T0 + timedelta(minutes=minutes)
    return {
        "id": row_id,
        "email": email,
        "code": code,
        "type": purpose,
        "created_at": created,
        "expires_at": created + timedelta(minutes=10),
        "used": used,
    }


@pytest_asyncio.fixture
async def sql_repository(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'repository.db'}")
    await initialize_database(bind=engine)
    yield SQLRepository(build_session_factory(engine))
    await engine.dispose()


class TestSQLRepository:

    @pytest.mark.asyncio
    async def test_select_filters_orders_and_limits(self, sql_repository):
        await sql_repository.insert_row("otp_codes", _otp_row("a", minutes=0))
        await sql_repository.insert_row("otp_codes", _otp_row("b", minutes=5))
        await sql_repository.insert_row("otp_codes", _otp_row("c", minutes=1, purpose="password_reset"))

        rows = await sql_repository.select_rows(
            "otp_codes",
            where={"email": "user@example.com", "type": "verification"},
            order_by="created_at",
        )
        assert [r["id"] for r in rows] == ["b", "a"]

        rows = await sql_repository.select_rows("otp_codes", order_by="created_at", descending=False, limit=2)
        assert [r["id"] for r in rows] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_gte_bound_is_inclusive(self, sql_repository):
        await sql_repository.insert_row("otp_codes", _otp_row("a"))
        rows = await sql_repository.select_rows("otp_codes", gte={"expires_at": T0 + timedelta(minutes=10)})
        assert [r["id"] for r in rows] == ["a"]
        rows = await sql_repository.select_rows("otp_codes", gte={"expires_at": T0 + timedelta(minutes=10, seconds=1)})
        assert rows == []

    @pytest.mark.asyncio
    async def test_in_filter(self, sql_repository):
        for row_id in ("a", "b", "c"):
            await sql_repository.insert_row("otp_codes", _otp_row(row_id))
        rows = await sql_repository.select_rows("otp_codes", where={"id": ["a", "c", "missing"]}, order_by="id", descending=False)
        assert [r["id"] for r in rows] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_conditional_update_claims_once(self, sql_repository):
        await sql_repository.insert_row("otp_codes", _otp_row("a"))
        assert await sql_repository.update_rows("otp_codes", {"id": "a", "used": False}, {"used": True}) == 1
        assert await sql_repository.update_rows("otp_codes", {"id": "a", "used": False}, {"used": True}) == 0
        rows = await sql_repository.select_rows("otp_codes", where={"id": "a"})
        assert rows[0]["used"] is True

    @pytest.mark.asyncio
    async def test_delete_returns_count(self, sql_repository):
        await sql_repository.insert_row("enquiries", {
            "id": "e-1", "full_name": "Ravi", "email": "ravi@example.com", "phone": "9000000001", "status": "pending",
        })
        assert await sql_repository.delete_rows("enquiries", {"id": "e-1"}) == 1
        assert await sql_repository.delete_rows("enquiries", {"id": "e-1"}) == 0

    @pytest.mark.asyncio
    async def test_unknown_table(self, sql_repository):
        with pytest.raises(ValueError):
            await sql_repository.select_rows("invoices")

    @pytest.mark.asyncio
    async def test_otp_flow_end_to_end(self, sql_repository):
        sent = []

        def mailer(to_email, otp_code, purpose, expiry_minutes=10):
            sent.append(otp_code)
            return True

        service = OtpService(sql_repository, mailer=mailer, clock=lambda: T0)
        await service.issue_code("user@example.com", "verification")
        await service.issue_code("user@example.com", "verification")

        rows = await sql_repository.select_rows("otp_codes", order_by="created_at", descending=False)
        assert sorted(r["used"] for r in rows) == [False, True]

        assert (await service.verify_code("user@example.com", sent[-1], "verification"))["success"] is True
        with pytest.raises(InvalidOrExpired):
            await service.verify_code("user@example.com", sent[-1], "verification")


class TestInMemoryRepository:

    @pytest.mark.asyncio
    async def test_rows_are_copied(self):
        repository = InMemoryRepository()
        row = _otp_row("a")
        await repository.insert_row("otp_codes", row)
        row["used"] = True
        selected = await repository.select_rows("otp_codes")
        selected[0]["code"] = "000000"
        assert repository.tables["otp_codes"][0]["used"] is False
        assert repository.tables["otp_codes"][0]["code"] == "123456"

    @pytest.mark.asyncio
    async def test_in_and_gte(self):
        repository = InMemoryRepository({"otp_codes": [_otp_row("a"), _otp_row("b", minutes=3), _otp_row("c", minutes=6)]})
        rows = await repository.select_rows(
            "otp_codes",
            where={"id": ("a", "c")},
            gte={"created_at": T0 + timedelta(minutes=1)},
        )
        assert [r["id"] for r in rows] == ["c"]

    @pytest.mark.asyncio
    async def test_none_sorts_last_when_descending(self):
        repository = InMemoryRepository({"bookings": [
            {"id": "old", "created_at": T0},
            {"id": "unknown", "created_at": None},
            {"id": "new", "created_at": T0 + timedelta(days=1)},
        ]})
        rows = await repository.select_rows("bookings", order_by="created_at")
        assert [r["id"] for r in rows] == ["new", "old", "unknown"]


class TestMongoFilter:

    def test_equality_and_in(self):
        assert MongoRepository._filter({"email": "a@b.co", "id": ["x", "y"]}) == {
            "email": "a@b.co",
            "id": {"$in": ["x", "y"]},
        }

    def test_gte(self):
        bound = T0
        assert MongoRepository._filter({"used": False}, {"expires_at": bound}) == {
            "used": False,
            "expires_at": {"$gte": bound},
        }

    def test_gte_on_filtered_column(self):
        assert MongoRepository._filter({"n": 3}, {"n": 1}) == {"n": {"$eq": 3, "$gte": 1}}
