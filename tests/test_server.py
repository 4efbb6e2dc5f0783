"""REST API tests.

Runs the FastAPI app in-process through httpx's ASGI transport with the
lifespan entered manually, a fake clock, and a stub sheet fetcher.
"""

from __future__ import annotations

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from rbs_pipeline import __version__
from rbs_pipeline.listings.csv_parser import generate_csv_template
from rbs_pipeline.listings.types import ListingInput
from rbs_pipeline.server.config import ServerConfig
from rbs_pipeline.server.rest.app import create_app

CRON_SECRET = "s3cret"
SHEET_URL = "https://docs.google.com/spreadsheets/d/abc"


def sheet_rows() -> list[ListingInput]:
    return [
        ListingInput(
            title="Chess Club",
            description="Weekly chess for kids",
            category_name="Kids & Teens",
            provider_name="Rook Academy",
        ),
    ]


async def fetch_rows(source) -> list[ListingInput]:
    return sheet_rows()


async def _client_for(config: ServerConfig, clock):
    app = create_app(config, fetcher=fetch_rows, clock=clock)
    # ASGITransport doesn't run the lifespan
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
async def client(fake_clock):
    async for c in _client_for(ServerConfig(mode="rest", cron_secret=None), fake_clock):
        yield c


@pytest.fixture
async def secured_client(fake_clock):
    async for c in _client_for(ServerConfig(mode="rest", cron_secret=CRON_SECRET), fake_clock):
        yield c


async def add_source(client: AsyncClient, **overrides) -> dict:
    body = {"name": "Classes sheet", "url": SHEET_URL, **overrides}
    resp = await client.post("/api/v1/sync/sources", json=body)
    assert resp.status_code == 201
    return resp.json()


# ============================================================================
# Health
# ============================================================================


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__
        assert data["mode"] == "rest"
        assert data["uptime_seconds"] >= 0


# ============================================================================
# Imports
# ============================================================================


class TestChatImport:
    @pytest.mark.asyncio
    async def test_import(self, client, english_export):
        resp = await client.post(
            "/api/v1/imports/chat",
            json={"content": english_export, "file_name": "rbs-parents.txt"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "COMPLETED"
        assert data["group_name"] == "RBS Parents"
        assert data["message_count"] == 6
        assert data["stats"]["system_messages"] == 2
        assert data["entity_count"] == len(data["entities"])
        assert all(e["approval_status"] == "PENDING" for e in data["entities"])
        assert all(e["import_id"] == data["import_id"] for e in data["entities"])

    @pytest.mark.asyncio
    async def test_not_an_export(self, client):
        resp = await client.post(
            "/api/v1/imports/chat",
            json={"content": "name,price\nyoga,50", "file_name": "listings.csv"},
        )
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "import_failed"
        assert data["file_name"] == "listings.csv"


class TestCsvImport:
    @pytest.mark.asyncio
    async def test_import_template(self, client):
        resp = await client.post("/api/v1/imports/csv", json={"content": generate_csv_template()})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["created"] == 1
        assert data["success_rate"] == 100.0
        listing = data["listings"][0]
        assert listing["category_id"] == "cat-kids-sports"
        assert listing["source_type"] == "CSV_IMPORT"
        assert listing["status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_duplicate_rows_skipped(self, client):
        resp = await client.post("/api/v1/imports/csv", json={
            "content": generate_csv_template(),
            "existing_listings": [{"title": "Kids Soccer Classes", "title_he": "חוג כדורגל לילדים"}],
        })
        data = resp.json()
        assert data["created"] == 0
        assert data["skipped"] == 1
        assert data["warnings"][0]["message"].startswith("Potential duplicate")

    @pytest.mark.asyncio
    async def test_empty_file(self, client):
        resp = await client.post("/api/v1/imports/csv", json={"content": "", "file_name": "x.csv"})
        assert resp.status_code == 422
        assert "CSV file is empty" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_bad_delimiter_rejected(self, client):
        resp = await client.post("/api/v1/imports/csv", json={"content": "a", "delimiter": ";;"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_template_download(self, client):
        resp = await client.get("/api/v1/imports/csv/template")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.text.startswith("title,titleHe,")

    @pytest.mark.asyncio
    async def test_structure(self, client):
        resp = await client.post("/api/v1/imports/csv/structure", json={"content": "a,b\n1\n"})
        data = resp.json()
        assert data["is_valid"] is False
        assert data["errors"] == ["Row 2 has 1 columns, expected 2"]
        assert data["column_count"] == 2


# ============================================================================
# Listings
# ============================================================================


class TestListings:
    @pytest.mark.asyncio
    async def test_validate(self, client):
        resp = await client.post("/api/v1/listings/validate", json={
            "title": "Chess Club",
            "description": "Weekly chess",
            "category": "Kids & Teens",
            "providerName": "Rook Academy",
            "email": "nope",
        })
        data = resp.json()
        assert data["is_valid"] is False
        assert [e["code"] for e in data["errors"]] == ["INVALID_EMAIL"]
        assert {w["code"] for w in data["warnings"]} == {
            "MISSING_HEBREW_TITLE",
            "MISSING_HEBREW_DESCRIPTION",
        }

    @pytest.mark.asyncio
    async def test_numeric_phone_and_title(self, client):
        resp = await client.post("/api/v1/listings/validate", json={
            "title": 2024,
            "description": "Weekly chess",
            "category": "Kids & Teens",
            "providerName": "Rook Academy",
            "phone": 521234567,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["is_valid"] is True
        assert "INVALID_PHONE_FORMAT" in {w["code"] for w in data["warnings"]}

    @pytest.mark.asyncio
    async def test_nested_value_is_a_type_error(self, client):
        resp = await client.post("/api/v1/listings/validate", json={
            "title": {"en": "Chess"},
            "description": "Weekly chess",
            "category": "Kids & Teens",
            "providerName": "Rook Academy",
        })
        assert resp.status_code == 200
        codes = [e["code"] for e in resp.json()["errors"]]
        assert codes == ["INVALID_TYPE", "REQUIRED_TITLE"]

    @pytest.mark.asyncio
    async def test_normalize(self, client):
        resp = await client.post("/api/v1/listings/normalize", json={
            "title": " Soccer ",
            "category": "Sports",
            "price": "₪200",
            "priceType": "per month",
            "phone": "+972521234567",
            "neighborhood": "RBS A",
        })
        listing = resp.json()["listing"]
        assert listing == {
            "title": "Soccer",
            "category_id": "cat-kids-sports",
            "price": 200.0,
            "price_type": "MONTHLY",
            "phone": "052-123-4567",
            "neighborhood": "רמת בית שמש א",
        }

    @pytest.mark.asyncio
    async def test_check_duplicates(self, client):
        resp = await client.post("/api/v1/listings/check-duplicates", json={
            "listing": {"title": "Kids Soccer", "providerId": "prov-1"},
            "existing_listings": [{"title": "Kids Soccer", "provider_id": "prov-1"}],
        })
        assert resp.json() == {"is_duplicate": True, "confidence": 0.8, "matches": ["Kids Soccer"]}

    @pytest.mark.asyncio
    async def test_batch(self, client):
        good = {
            "title": "Chess Club",
            "description": "Weekly chess",
            "category": "Kids & Teens",
            "providerName": "Rook Academy",
        }
        resp = await client.post("/api/v1/listings/batch", json={
            "listings": [good, {"description": "no title"}],
            "auto_approve": True,
        })
        data = resp.json()
        assert data["success"] is False
        assert data["created"] == 1
        assert data["skipped"] == 1
        assert data["success_rate"] == 50.0
        assert {e["row"] for e in data["errors"]} == {2}
        assert data["listings"][0]["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_batch_with_numeric_cells(self, client):
        base = {
            "description": "Weekly class",
            "category": "Kids & Teens",
            "providerName": "Rook Academy",
        }
        resp = await client.post("/api/v1/listings/batch", json={"listings": [
            {**base, "title": "Chess Club"},
            {**base, "title": "Drama", "phone": 521234567},
            {**base, "title": 2024},
        ]})
        data = resp.json()
        assert data["created"] == 3
        assert data["listings"][1]["phone"] == "052-123-4567"
        assert data["listings"][2]["title"] == "2024"


# ============================================================================
# Access log
# ============================================================================

ACCESS_LOGGER = "rbs_pipeline.server.rest.middleware"


class TestAccessLog:
    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        resp = await client.get("/api/v1/imports/csv/template")
        assert resp.headers["X-Request-ID"].startswith("req-")

        resp = await client.get(
            "/api/v1/imports/csv/template", headers={"X-Request-ID": "abc-123"}
        )
        assert resp.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_csv_import_counts_are_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        await client.post(
            "/api/v1/imports/csv",
            json={"content": generate_csv_template()},
            headers={"X-Request-ID": "import-1"},
        )
        lines = [r.getMessage() for r in caplog.records if r.name == ACCESS_LOGGER]
        assert len(lines) == 1
        assert lines[0].startswith("POST /api/v1/imports/csv -> 200")
        assert lines[0].endswith("[import-1] created=1 skipped=0 errors=0")

    @pytest.mark.asyncio
    async def test_sync_trigger_counts_are_logged(self, client, caplog):
        await add_source(client)
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        await client.post("/api/v1/sync/trigger", json={})
        lines = [r.getMessage() for r in caplog.records if r.name == ACCESS_LOGGER]
        assert lines[-1].endswith("sources=1 synced=1 failed=0")

    @pytest.mark.asyncio
    async def test_health_is_quiet(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        await client.get("/api/v1/health")
        assert [r for r in caplog.records if r.name == ACCESS_LOGGER] == []


# ============================================================================
# Sync
# ============================================================================


class TestSyncSources:
    @pytest.mark.asyncio
    async def test_crud(self, client):
        source = await add_source(client, sync_frequency="HOURLY")
        assert source["type"] == "GOOGLE_SHEETS"
        assert source["sync_frequency"] == "HOURLY"
        assert source["last_sync_at"] is None

        listed = (await client.get("/api/v1/sync/sources")).json()
        assert [s["id"] for s in listed] == [source["id"]]

        resp = await client.delete(f"/api/v1/sync/sources/{source['id']}")
        assert resp.json() == {"deleted": True, "id": source["id"]}

        resp = await client.delete(f"/api/v1/sync/sources/{source['id']}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_rejects_unknown_frequency(self, client):
        resp = await client.post("/api/v1/sync/sources", json={
            "name": "x", "url": SHEET_URL, "sync_frequency": "YEARLY",
        })
        assert resp.status_code == 422


class TestSyncTrigger:
    @pytest.mark.asyncio
    async def test_trigger_all(self, client):
        await add_source(client)
        await add_source(client, name="Paused", is_active=False)

        resp = await client.post("/api/v1/sync/trigger", json={})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Synced 1/1 sources"
        assert data["results"][0]["created"] == 1

    @pytest.mark.asyncio
    async def test_trigger_one(self, client):
        source = await add_source(client)
        resp = await client.post("/api/v1/sync/trigger", json={"source_id": source["id"]})
        data = resp.json()
        assert data["total_sources"] == 1
        assert data["results"][0]["source_id"] == source["id"]

    @pytest.mark.asyncio
    async def test_unknown_source(self, client):
        resp = await client.post("/api/v1/sync/trigger", json={"source_id": "sync-missing"})
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_inactive_source(self, client):
        source = await add_source(client, is_active=False)
        resp = await client.post("/api/v1/sync/trigger", json={"source_id": source["id"]})
        assert resp.status_code == 409
        assert resp.json()["error"] == "source_inactive"

    @pytest.mark.asyncio
    async def test_requires_secret(self, secured_client):
        resp = await secured_client.post("/api/v1/sync/trigger", json={})
        assert resp.status_code == 401

        resp = await secured_client.post(
            "/api/v1/sync/trigger", json={}, headers={"Authorization": "Bearer wrong"}
        )
        assert resp.status_code == 401

        resp = await secured_client.post(
            "/api/v1/sync/trigger", json={}, headers={"Authorization": f"Bearer {CRON_SECRET}"}
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Synced 0/0 sources"


class TestSyncStatusAndLogs:
    @pytest.mark.asyncio
    async def test_status(self, client):
        await add_source(client)
        data = (await client.get("/api/v1/sync/status")).json()
        assert data["total_sources"] == 1
        assert data["active_sources"] == 1
        assert data["pending_syncs"] == 1
        assert data["last_sync_time"] is None
        assert data["next_scheduled_sync"].startswith("2024-01-16T02:00:00")

    @pytest.mark.asyncio
    async def test_logs(self, client):
        a = await add_source(client, name="A")
        b = await add_source(client, name="B")
        await client.post("/api/v1/sync/trigger", json={"source_id": a["id"]})
        await client.post("/api/v1/sync/trigger", json={"source_id": b["id"]})

        all_logs = (await client.get("/api/v1/sync/logs")).json()
        assert len(all_logs) == 2
        assert {log["status"] for log in all_logs} == {"SUCCESS"}

        only_a = (await client.get("/api/v1/sync/logs", params={"source_id": a["id"]})).json()
        assert [log["source_id"] for log in only_a] == [a["id"]]
        assert only_a[0]["records_created"] == 1
