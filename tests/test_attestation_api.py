"""Tests for the attestation run and instance HTTP API.

Covers:
- run creation requires authentication and the attestation_admin role
- recipients see their pending instances; attesting moves them to history
- non-recipients cannot attest; unknown instances return 404
- attest-entity raises an ad-hoc run when nothing is pending
- selector and latest-measurable-category lookups
- cleanup-orphans is admin only
- attesting writes a change log entry against the parent entity
"""

import pytest


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_app(client, headers, name: str = "Trade Booking") -> dict:
    r = await client.post("/api/v1/applications", json={"name": name, "asset_code": "TB-01"}, headers=headers)
    assert r.status_code == 201
    return r.json()


async def _create_category(client, headers, name: str = "Function") -> dict:
    r = await client.post("/api/v1/measurable-categories", json={"name": name}, headers=headers)
    assert r.status_code == 201
    return r.json()


async def _create_run(client, headers, targets: list[dict], **overrides) -> dict:
    payload = {
        "name": "Q1 Flow Attestation",
        "description": "Quarterly flow review",
        "attested_entity_kind": "LOGICAL_DATA_FLOW",
        "due_date": "2026-12-31",
        "targets": targets,
    }
    payload.update(overrides)
    r = await client.post("/api/v1/attestation-runs", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _target(app: dict, *recipients: str) -> dict:
    return {
        "entity_reference": {"kind": "APPLICATION", "id": app["id"]},
        "recipients": list(recipients),
    }


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_run_requires_authentication(client):
    r = await client.post(
        "/api/v1/attestation-runs",
        json={"name": "x", "attested_entity_kind": "LOGICAL_DATA_FLOW", "due_date": "2026-12-31"},
    )
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "AUTHENTICATION_ERROR"


@pytest.mark.asyncio
async def test_create_run_requires_admin_role(client, auth_headers):
    r = await client.post(
        "/api/v1/attestation-runs",
        json={"name": "x", "attested_entity_kind": "LOGICAL_DATA_FLOW", "due_date": "2026-12-31"},
        headers=auth_headers("jane"),
    )
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "AUTHORIZATION_ERROR"


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    r = await client.get("/api/v1/attestation-instances/user", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401
    assert r.json()["error"]["message"] == "invalid_token"


@pytest.mark.asyncio
async def test_create_run_validation_error(client, auth_headers):
    r = await client.post(
        "/api/v1/attestation-runs",
        json={"name": "", "attested_entity_kind": "NOT_A_KIND", "due_date": "2026-12-31"},
        headers=auth_headers("admin", "admin"),
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_run_creates_instances_for_targets(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    app_a = await _create_app(client, admin, "Payments Hub")
    app_b = await _create_app(client, admin, "Ledger")

    run = await _create_run(client, admin, [_target(app_a, "jane"), _target(app_b, "jane", "bob")])
    assert run["issued_by"] == "admin"
    assert run["attested_entity_kind"] == "LOGICAL_DATA_FLOW"

    r = await client.get(f"/api/v1/attestation-instances/run/{run['id']}")
    assert r.status_code == 200
    by_name = {i["parent_entity"]["name"]: i for i in r.json()}
    assert sorted(by_name) == ["Ledger", "Payments Hub"]

    ledger_id = by_name["Ledger"]["id"]
    r = await client.get(f"/api/v1/attestation-instances/{ledger_id}/recipients")
    assert r.json() == ["bob", "jane"]
    assert (await client.get("/api/v1/attestation-instances/999/recipients")).status_code == 404

    r = await client.get(f"/api/v1/attestation-runs/{run['id']}")
    assert r.json()["name"] == "Q1 Flow Attestation"

    r = await client.get(f"/api/v1/attestation-runs/entity/APPLICATION/{app_b['id']}")
    assert [x["id"] for x in r.json()] == [run["id"]]

    r = await client.get("/api/v1/attestation-runs")
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_get_unknown_run_and_instance(client):
    assert (await client.get("/api/v1/attestation-runs/404")).status_code == 404
    r = await client.get("/api/v1/attestation-instances/404")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_recipient_attests_instance(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)
    run = await _create_run(client, admin, [_target(app, "jane")])

    pending = (await client.get("/api/v1/attestation-instances/user", headers=jane)).json()
    assert len(pending) == 1
    instance_id = pending[0]["id"]
    assert pending[0]["attestation_run_id"] == run["id"]

    r = await client.post(f"/api/v1/attestation-instances/attest/{instance_id}", headers=jane)
    assert r.status_code == 200
    assert r.json() is True

    # Second attempt is a no-op
    r = await client.post(f"/api/v1/attestation-instances/attest/{instance_id}", headers=jane)
    assert r.json() is False

    pending = (await client.get("/api/v1/attestation-instances/user", headers=jane)).json()
    assert pending == []

    everything = (
        await client.get("/api/v1/attestation-instances/user", params={"unattested_only": False}, headers=jane)
    ).json()
    assert everything[0]["attested_by"] == "jane"
    assert everything[0]["attested_at"] is not None


@pytest.mark.asyncio
async def test_non_recipient_cannot_attest(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    app = await _create_app(client, admin)
    run = await _create_run(client, admin, [_target(app, "jane")])
    instance_id = (await client.get(f"/api/v1/attestation-instances/run/{run['id']}")).json()[0]["id"]

    r = await client.post(f"/api/v1/attestation-instances/attest/{instance_id}", headers=auth_headers("bob"))
    assert r.status_code == 403

    r = await client.post("/api/v1/attestation-instances/attest/999", headers=auth_headers("bob"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_historical_for_pending(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)

    first = await _create_run(client, admin, [_target(app, "jane")], name="2025 review")
    first_instance = (await client.get(f"/api/v1/attestation-instances/run/{first['id']}")).json()[0]
    await client.post(f"/api/v1/attestation-instances/attest/{first_instance['id']}", headers=jane)

    await _create_run(client, admin, [_target(app, "jane")], name="2026 review")

    r = await client.get("/api/v1/attestation-instances/historical/user", headers=jane)
    assert r.status_code == 200
    assert [i["id"] for i in r.json()] == [first_instance["id"]]


@pytest.mark.asyncio
async def test_attest_entity_uses_pending_instances(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)
    category = await _create_category(client, admin)
    run = await _create_run(
        client,
        admin,
        [_target(app, "jane")],
        attested_entity_kind="MEASURABLE_CATEGORY",
        attested_entity_id=category["id"],
    )

    command = {
        "entity_reference": {"kind": "APPLICATION", "id": app["id"]},
        "attested_entity_kind": "MEASURABLE_CATEGORY",
        "attested_entity_id": category["id"],
    }
    r = await client.post("/api/v1/attestation-instances/attest-entity", json=command, headers=jane)
    assert r.status_code == 200
    assert r.json() is True

    instances = (await client.get(f"/api/v1/attestation-instances/entity/APPLICATION/{app['id']}")).json()
    assert len(instances) == 1
    assert instances[0]["attestation_run_id"] == run["id"]
    assert instances[0]["attested_by"] == "jane"


@pytest.mark.asyncio
async def test_attest_entity_raises_ad_hoc_run(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)

    command = {
        "entity_reference": {"kind": "APPLICATION", "id": app["id"]},
        "attested_entity_kind": "LOGICAL_DATA_FLOW",
    }
    r = await client.post("/api/v1/attestation-instances/attest-entity", json=command, headers=jane)
    assert r.status_code == 200
    assert r.json() is True

    runs = (await client.get(f"/api/v1/attestation-runs/entity/APPLICATION/{app['id']}")).json()
    assert len(runs) == 1
    assert runs[0]["name"] == "Logical Data Flow Attestation"
    assert runs[0]["issued_by"] == "jane"

    instances = (await client.get(f"/api/v1/attestation-instances/entity/APPLICATION/{app['id']}")).json()
    assert instances[0]["attested_by"] == "jane"
    assert instances[0]["parent_entity"]["name"] == "Trade Booking"


@pytest.mark.asyncio
async def test_selector_and_latest_measurable(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)
    category = await _create_category(client, admin, "Product")
    run = await _create_run(
        client,
        admin,
        [_target(app, "jane")],
        name="Product review",
        attested_entity_kind="MEASURABLE_CATEGORY",
        attested_entity_id=category["id"],
    )
    instance_id = (await client.get(f"/api/v1/attestation-instances/run/{run['id']}")).json()[0]["id"]

    selector = {"entity_reference": {"kind": "MEASURABLE_CATEGORY", "id": category["id"]}}
    r = await client.post("/api/v1/attestation-instances/selector", json=selector)
    assert r.json() == []

    await client.post(f"/api/v1/attestation-instances/attest/{instance_id}", headers=jane)

    r = await client.post("/api/v1/attestation-instances/selector", json=selector)
    assert [i["id"] for i in r.json()] == [instance_id]

    r = await client.get(f"/api/v1/attestation-instances/latest/measurable-category/APPLICATION/{app['id']}")
    assert r.status_code == 200
    [info] = r.json()
    assert info["category_ref"]["name"] == "Product"
    assert info["attestation_instance_ref"] == {"kind": "ATTESTATION", "id": instance_id, "name": None, "description": None}
    assert info["attestation_run_ref"]["name"] == "Product review"
    assert info["attested_by"] == "jane"


@pytest.mark.asyncio
async def test_selector_rejects_unsupported_kind(client):
    r = await client.post(
        "/api/v1/attestation-instances/selector",
        json={"entity_reference": {"kind": "PHYSICAL_FLOW", "id": 1}},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_cleanup_orphans_admin_only(client, auth_headers):
    admin = auth_headers("admin", "admin")
    app = await _create_app(client, admin)
    await _create_run(client, admin, [_target(app, "jane")])

    r = await client.post("/api/v1/attestation-instances/cleanup-orphans", headers=auth_headers("jane"))
    assert r.status_code == 403

    r = await client.post("/api/v1/attestation-instances/cleanup-orphans", headers=admin)
    assert r.json() == 0

    r = await client.patch(
        f"/api/v1/applications/{app['id']}",
        json={"entity_lifecycle_status": "REMOVED"},
        headers=admin,
    )
    assert r.json()["entity_lifecycle_status"] == "REMOVED"

    r = await client.post("/api/v1/attestation-instances/cleanup-orphans", headers=admin)
    assert r.json() == 1

    r = await client.get(f"/api/v1/attestation-instances/entity/APPLICATION/{app['id']}")
    assert r.json() == []


@pytest.mark.asyncio
async def test_attest_writes_change_log(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    jane = auth_headers("jane")
    app = await _create_app(client, admin)
    run = await _create_run(client, admin, [_target(app, "jane")])
    instance_id = (await client.get(f"/api/v1/attestation-instances/run/{run['id']}")).json()[0]["id"]

    await client.post(f"/api/v1/attestation-instances/attest/{instance_id}", headers=jane)

    r = await client.get(f"/api/v1/change-log/APPLICATION/{app['id']}")
    entries = r.json()
    assert [e["operation"] for e in entries] == ["ATTEST", "ADD"]
    assert entries[0]["user_id"] == "jane"
    assert entries[0]["child_kind"] == "ATTESTATION"

    r = await client.get(f"/api/v1/change-log/APPLICATION/{app['id']}", params={"limit": 1})
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_create_run_rejects_repeated_target(client, auth_headers):
    admin = auth_headers("admin", "attestation_admin")
    app = await _create_app(client, admin)

    r = await client.post(
        "/api/v1/attestation-runs",
        json={
            "name": "Duplicate targets",
            "attested_entity_kind": "LOGICAL_DATA_FLOW",
            "due_date": "2026-12-31",
            "targets": [_target(app, "jane"), _target(app, "bob")],
        },
        headers=admin,
    )
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "CONFLICT"

    assert (await client.get("/api/v1/attestation-runs")).json() == []
