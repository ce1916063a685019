"""Person Routes: POST /person enrichment flow and GET /person/{id}.

Invariants:
    - Success -> 200 with camelCase record, null fields omitted, row persisted
    - Any external Failure -> 400 with a generic message, nothing persisted
    - Invalid request body -> 400 VALIDATION_ERROR
    - Store failure after a successful lookup -> 503 DATABASE_ERROR
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from person_api.db.session import create_session_factory
from person_api.infrastructure.database import DatabaseSessionManager, get_db
import person_api.infrastructure.database as db_module
from person_api.main import app
from person_api.models.person import Person

from tests.services.mock_external import fail, reply

import httpx

PAYLOAD = {"count": 5, "name": "peter", "gender": "male", "probability": 0.98}


async def test_add_person_returns_enriched_record(client, external_script, test_db):
    external_script.append(reply(200, json=PAYLOAD))

    res = await client.post("/person", json={"name": "peter", "lastName": "parker"})

    assert res.status_code == 200
    body = res.json()
    assert body == {
        "id": body["id"],
        "count": 5,
        "name": "peter",
        "lastName": "parker",
        "gender": "male",
        "probability": 0.98,
    }
    rows = (await test_db.execute(select(Person))).scalars().all()
    assert len(rows) == 1
    assert rows[0].last_name == "parker"


async def test_add_person_retries_transient_status(client, external_script, external):
    external_script.extend([reply(503), reply(200, json=PAYLOAD)])

    res = await client.post("/person", json={"name": "peter", "lastName": "parker"})

    assert res.status_code == 200
    assert external["transport"].calls == 2


async def test_add_person_omits_unknown_gender(client, external_script):
    external_script.append(
        reply(200, json={"count": 0, "name": "zzq", "gender": None, "probability": None}),
    )

    res = await client.post("/person", json={"name": "zzq", "lastName": "x"})

    assert res.status_code == 200
    assert "gender" not in res.json()
    assert "probability" not in res.json()


async def test_external_failure_returns_400_and_stores_nothing(
    client, external_script, test_db,
):
    external_script.append(reply(404))

    res = await client.post("/person", json={"name": "peter", "lastName": "parker"})

    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "EXTERNAL_SERVICE_ERROR"
    assert error["reason"] == "not_success_status"
    rows = (await test_db.execute(select(Person))).scalars().all()
    assert rows == []


async def test_transport_failure_message_is_generic(client, external_script):
    external_script.append(fail(httpx.ConnectError, "connect to 10.0.0.7 refused"))

    res = await client.post("/person", json={"name": "peter", "lastName": "parker"})

    assert res.status_code == 400
    assert "10.0.0.7" not in res.text
    assert res.json()["error"]["reason"] == "exception"


async def test_missing_last_name_is_validation_error(client, external):
    res = await client.post("/person", json={"name": "peter"})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert external["transport"].calls == 0


async def test_blank_name_is_validation_error(client):
    res = await client.post("/person", json={"name": "   ", "lastName": "parker"})

    assert res.status_code == 400


async def test_snake_case_input_is_accepted(client, external_script):
    external_script.append(reply(200, json=PAYLOAD))

    res = await client.post("/person", json={"name": "peter", "last_name": "parker"})

    assert res.status_code == 200
    assert res.json()["lastName"] == "parker"


async def test_get_person_reads_back_stored_record(client, external_script):
    external_script.append(reply(200, json=PAYLOAD))
    created = (await client.post(
        "/person", json={"name": "peter", "lastName": "parker"},
    )).json()

    res = await client.get(f"/person/{created['id']}")

    assert res.status_code == 200
    assert res.json() == created


async def test_get_missing_person_returns_404(client):
    res = await client.get("/person/999")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_liveness_probe(client):
    res = await client.get("/health/")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_probe_checks_database(client):
    res = await client.get("/health/ready")

    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_store_failure_returns_503_and_stores_nothing(
    client, external_script, test_db,
):
    """Real get_db over a store without the persons table."""
    external_script.append(reply(200, json=PAYLOAD))
    broken_engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    broken = DatabaseSessionManager.__new__(DatabaseSessionManager)
    broken.engine = broken_engine
    broken._session_factory = create_session_factory(broken_engine)
    app.dependency_overrides.pop(get_db)
    db_module.db_manager = broken

    try:
        res = await client.post("/person", json={"name": "peter", "lastName": "parker"})
    finally:
        await broken_engine.dispose()

    assert res.status_code == 503
    assert res.json()["error"]["code"] == "DATABASE_ERROR"
    assert "no such table" not in res.text
    rows = (await test_db.execute(select(Person))).scalars().all()
    assert rows == []
