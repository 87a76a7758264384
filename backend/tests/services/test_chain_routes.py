"""Chain Routes — HTTP surface over the deployer, registry, tracker and remover.

Invariants:
    - POST /deploy returns 201 with the INITIALIZED chain
    - Domain errors map to their HTTP status with a structured error envelope
    - Pydantic validation errors return 400 VALIDATION_ERROR
    - DELETE of an unknown chain returns removed=false (not 404)
"""

import logging

from chainmgr.core.domain_types import ChainStatus, PERCENTAGE_IN_PROGRESS

DEPLOY_BODY = {
    "chain_id": 7,
    "chain_name": "alpha",
    "version": "v2.9.1",
    "deploy_host_list": [
        {"ip": "10.0.0.1", "num": 3},
        {"ip": "10.0.0.2", "num": 2},
    ],
}


async def test_deploy_returns_created_chain(client):
    res = await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    assert res.status_code == 201
    body = res.json()
    assert body["chain_id"] == 7
    assert body["chain_status"] == ChainStatus.INITIALIZED.value
    assert body["deploy_type"] == "api"


async def test_deploy_with_one_node_is_400(client):
    body = {**DEPLOY_BODY, "deploy_host_list": [{"ip": "10.0.0.1", "num": 1}]}
    res = await client.post("/api/v1/chains/deploy", json=body)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "TWO_NODES_AT_LEAST"


async def test_deploy_duplicate_is_409(client):
    await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    res = await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CHAIN_ID_EXISTS"


async def test_deploy_unreachable_host_is_502(client, host_checker):
    host_checker.unreachable.add("10.0.0.2")
    res = await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    assert res.status_code == 502
    error = res.json()["error"]
    assert error["code"] == "HOST_CONNECT_ERROR"
    assert error["context"]["host"] == "10.0.0.2"


async def test_deploy_invalid_ip_is_validation_error(client):
    body = {**DEPLOY_BODY, "deploy_host_list": [{"ip": "not-an-ip", "num": 2}]}
    res = await client.post("/api/v1/chains/deploy", json=body)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_register_manual_chain(client):
    res = await client.post(
        "/api/v1/chains", json={"chain_id": 5, "chain_name": "ext", "version": "v2.8.0"},
    )
    assert res.status_code == 201
    assert res.json()["deploy_type"] == "manually"
    assert res.json()["chain_status"] == "running"


async def test_list_and_get(client):
    await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    listed = await client.get("/api/v1/chains")
    assert [c["chain_id"] for c in listed.json()] == [7]

    res = await client.get("/api/v1/chains/7")
    assert res.status_code == 200
    assert res.json()["chain_name"] == "alpha"


async def test_get_unknown_chain_is_404(client):
    res = await client.get("/api/v1/chains/404")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_progress_of_fresh_deploy(client):
    await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    res = await client.get("/api/v1/chains/7/progress")
    assert res.status_code == 200
    assert res.json() == {
        "chain_id": 7, "chain_status": "initialized", "progress": PERCENTAGE_IN_PROGRESS,
    }


async def test_progress_of_manual_chain_is_finished(client):
    await client.post("/api/v1/chains", json={"chain_id": 5, "chain_name": "ext"})
    res = await client.get("/api/v1/chains/5/progress")
    assert res.json()["progress"] == 100


async def test_delete_chain(client, reset_signal):
    await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    res = await client.delete("/api/v1/chains/7")
    assert res.json() == {"chain_id": 7, "removed": True}
    assert reset_signal.requests == 1
    assert (await client.get("/api/v1/chains/7")).status_code == 404


async def test_delete_unknown_chain(client):
    res = await client.delete("/api/v1/chains/404")
    assert res.status_code == 200
    assert res.json()["removed"] is False


async def test_health_endpoints(client):
    assert (await client.get("/api/v1/health/")).status_code == 200
    ready = await client.get("/api/v1/health/ready")
    assert ready.json()["status"] == "ready"


async def test_deploy_over_existing_chain_dir_is_409(client, paths):
    paths.chain_root("alpha").mkdir(parents=True)
    res = await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CHAIN_ROOT_EXISTS"
    assert paths.chain_root("alpha").exists()


async def test_domain_error_log_carries_host_and_status(client, host_checker, caplog):
    host_checker.unreachable.add("10.0.0.2")
    with caplog.at_level(logging.INFO, logger="chainmgr.api.error_handlers"):
        await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)

    record = next(
        r for r in caplog.records if r.name == "chainmgr.api.error_handlers"
    )
    assert record.levelno == logging.ERROR
    assert record.http_status == 502
    assert record.error_code == "HOST_CONNECT_ERROR"
    assert record.host == "10.0.0.2"
    assert record.path == "/api/v1/chains/deploy"


async def test_client_error_logged_as_warning(client, caplog):
    await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)
    with caplog.at_level(logging.INFO, logger="chainmgr.api.error_handlers"):
        await client.post("/api/v1/chains/deploy", json=DEPLOY_BODY)

    record = next(
        r for r in caplog.records if r.name == "chainmgr.api.error_handlers"
    )
    assert record.levelno == logging.WARNING
    assert record.http_status == 409
    assert record.chain_id == 7
