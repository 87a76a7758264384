"""Chain Deployer — end-to-end deploy against fake hosts and a real chain tree on disk.

Invariants:
    - Successful deploy: 1 chain (INITIALIZED, API), 1 default group whose node_count
      equals the requested total, one front/node/mapping per generated node dir
    - Rejections (node count, id, name, host, image) leave no rows and no files
    - A failure after build_chain leaves no rows and deletes the generated tree
    - A failing cleanup surfaces as ChainCleanupError
"""

import pytest
from sqlalchemy import func, select

from chainmgr.core.domain_types import (
    ChainStatus, DataStatus, DeployType, DockerImageType, EncryptType,
    FrontStatus,
    DEFAULT_GROUP_ID,
)
from chainmgr.core.errors import (
    ChainCleanupError, ChainIdExistsError, ChainNameExistsError, ChainRootExistsError,
    FrontConfigRenderError, HostConnectError, ImageNotExistsError,
    InsufficientNodesError, NodeConfigError,
)
from chainmgr.infrastructure.build_chain_shell import BuildChainShell
from chainmgr.infrastructure.front_config_renderer import FRONT_CONFIG_FILE
from chainmgr.models.chain import Chain
from chainmgr.models.front import Front
from chainmgr.models.front_group_map import FrontGroupMap
from chainmgr.models.group import Group
from chainmgr.models.node import Node
from chainmgr.services.chain_registry import ChainRegistry

from tests.services.fakes import (
    FailingFrontRenderer, UndeletablePaths, make_deploy_request, node_id_for,
    write_node_dir,
)


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _assert_no_rows(db):
    for model in (Chain, Group, Front, Node, FrontGroupMap):
        assert await _count(db, model) == 0, model.__tablename__


# ─── Happy path ──────────────────────────────────────────────────

async def test_deploy_creates_chain_initialized_by_api(deployed_chain, test_db):
    chain = await test_db.get(Chain, 7)
    assert chain.chain_name == "alpha"
    assert chain.chain_status == ChainStatus.INITIALIZED.value
    assert chain.deploy_type == DeployType.API.value
    assert chain.version == "v2.9.1"
    assert deployed_chain.chain_id == 7


async def test_deploy_creates_one_default_group_with_total_node_count(deployed_chain, test_db):
    groups = (await test_db.execute(select(Group))).scalars().all()
    assert len(groups) == 1
    assert groups[0].group_id == DEFAULT_GROUP_ID
    assert groups[0].node_count == 5


async def test_deploy_creates_front_node_and_mapping_per_node_dir(deployed_chain, test_db):
    assert await _count(test_db, Front) == 5
    assert await _count(test_db, Node) == 5
    assert await _count(test_db, FrontGroupMap) == 5


async def test_front_rows_carry_host_layout(deployed_chain, test_db):
    fronts = (await test_db.execute(
        select(Front).where(Front.front_ip == "10.0.0.2").order_by(Front.host_index),
    )).scalars().all()
    assert [f.host_index for f in fronts] == [0, 1]
    assert [f.front_port for f in fronts] == [5002, 5003]
    assert fronts[1].container_name == "data_fisco-alpha-node1"
    assert fronts[1].node_root_on_host == "/data/fisco/alpha/node1"
    assert fronts[1].channel_port == 20201
    assert fronts[1].p2p_port == 30301
    assert fronts[1].jsonrpc_port == 8546
    assert fronts[1].ext_org_id == 12
    assert all(f.front_status == FrontStatus.INITIALIZED.value for f in fronts)


async def test_node_rows_are_invalid_and_named_deterministically(deployed_chain, test_db):
    node_id = node_id_for("10.0.0.1", 2)
    node = await test_db.get(
        Node, {"node_id": node_id, "chain_id": 7, "group_id": DEFAULT_GROUP_ID},
    )
    assert node.node_name == f"7_1_{node_id}"
    assert node.node_active == DataStatus.INVALID.value
    assert node.node_ip == "10.0.0.1"


async def test_deploy_renders_front_config_in_every_node_dir(deployed_chain, paths):
    for ip, count in (("10.0.0.1", 3), ("10.0.0.2", 2)):
        for index in range(count):
            assert (paths.host_root("alpha", ip) / f"node{index}" / FRONT_CONFIG_FILE).exists()


async def test_build_chain_invoked_once_with_one_line_per_host(deployed_chain, build_runner):
    assert len(build_runner.calls) == 1
    _, ip_conf, chain_name = build_runner.calls[0]
    assert chain_name == "alpha"
    assert ip_conf == ["10.0.0.1:3 11 1", "10.0.0.2:2 12 1"]


async def test_pull_policy_skips_image_check(deployed_chain, image_checker):
    assert image_checker.checked == []


async def test_manual_policy_checks_image_on_every_host(deployer, image_checker):
    await deployer.generate_chain_config(make_deploy_request(), DockerImageType.MANUAL)
    assert image_checker.checked == [("10.0.0.1", "v2.9.1"), ("10.0.0.2", "v2.9.1")]


async def test_deploy_clears_cache_entry(deployer, cache):
    cache._by_chain[7] = ()
    await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    assert cache.peek(7) is None


# ─── Pre-checks: nothing written ────────────────────────────────

async def test_single_node_rejected_before_side_effects(deployer, build_runner, test_db):
    req = make_deploy_request(deploy_host_list=[{"ip": "10.0.0.1", "num": 1}])
    with pytest.raises(InsufficientNodesError):
        await deployer.generate_chain_config(req, DockerImageType.PULL)
    assert build_runner.calls == []
    await _assert_no_rows(test_db)


async def test_duplicate_chain_id_rejected(deployed_chain, deployer, build_runner):
    req = make_deploy_request(chain_name="beta")
    with pytest.raises(ChainIdExistsError):
        await deployer.generate_chain_config(req, DockerImageType.PULL)
    assert len(build_runner.calls) == 1


async def test_duplicate_chain_name_rejected(deployed_chain, deployer, build_runner):
    req = make_deploy_request(chain_id=8)
    with pytest.raises(ChainNameExistsError):
        await deployer.generate_chain_config(req, DockerImageType.PULL)
    assert len(build_runner.calls) == 1


async def test_unreachable_host_fails_fast(deployer, host_checker, build_runner, test_db):
    host_checker.unreachable.add("10.0.0.1")
    with pytest.raises(HostConnectError) as exc_info:
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    assert exc_info.value.context.host == "10.0.0.1"
    assert host_checker.checked == ["10.0.0.1"]
    assert build_runner.calls == []
    await _assert_no_rows(test_db)


async def test_missing_image_on_manual_policy(deployer, image_checker, build_runner, test_db):
    image_checker.missing.add("10.0.0.2")
    with pytest.raises(ImageNotExistsError):
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.MANUAL)
    assert build_runner.calls == []
    await _assert_no_rows(test_db)


# ─── Compensation ────────────────────────────────────────────────

async def test_render_failure_rolls_back_and_deletes_files(make_deployer, paths, test_db):
    deployer = make_deployer(front_renderer=FailingFrontRenderer(fail_on_call=3))
    with pytest.raises(FrontConfigRenderError):
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    await _assert_no_rows(test_db)
    assert not paths.chain_root("alpha").exists()


async def test_unreadable_node_dir_rolls_back(deployer, paths, build_runner, test_db):
    original = build_runner.build_chain

    async def build_then_corrupt(encrypt_type, ip_conf, chain_name):
        await original(encrypt_type, ip_conf, chain_name)
        (paths.host_root(chain_name, "10.0.0.2") / "node1" / "config.ini").unlink()

    build_runner.build_chain = build_then_corrupt
    with pytest.raises(NodeConfigError):
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    await _assert_no_rows(test_db)
    assert not paths.chain_root("alpha").exists()


async def test_build_failure_deletes_partial_output(deployer, build_runner, paths, test_db):
    build_runner.fail = True
    with pytest.raises(RuntimeError):
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    await _assert_no_rows(test_db)
    assert not paths.chain_root("alpha").exists()


async def test_cleanup_failure_raises_chain_cleanup_error(
    make_deployer, build_runner, tmp_path, test_db,
):
    build_runner.fail = True
    undeletable = UndeletablePaths(str(tmp_path / "NODES_ROOT"))
    deployer = make_deployer(deploy_paths=undeletable)
    with pytest.raises(ChainCleanupError) as exc_info:
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)
    assert exc_info.value.code == "DELETE_CHAIN_ERROR"
    assert undeletable.delete_calls == 1
    await _assert_no_rows(test_db)


async def test_failed_deploy_can_be_retried(make_deployer, build_runner, test_db):
    failing = make_deployer(front_renderer=FailingFrontRenderer(fail_on_call=1))
    with pytest.raises(FrontConfigRenderError):
        await failing.generate_chain_config(make_deploy_request(), DockerImageType.PULL)

    chain = await make_deployer().generate_chain_config(
        make_deploy_request(), DockerImageType.PULL,
    )
    assert chain.chain_id == 7
    assert await ChainRegistry(test_db).get(7) is not None


# ─── Pre-existing chain tree ─────────────────────────────────────

def _existing_tree(paths):
    node_dir = paths.host_root("alpha", "10.0.0.1") / "node0"
    write_node_dir(node_dir, "10.0.0.1", 0)
    return node_dir / "config.ini"


async def test_existing_chain_tree_rejected_and_kept(make_deployer, paths, tmp_path, test_db):
    marker = _existing_tree(paths)
    shell = BuildChainShell(str(tmp_path / "build_chain.sh"), paths)
    deployer = make_deployer(runner=shell)

    with pytest.raises(ChainRootExistsError) as exc_info:
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)

    assert exc_info.value.http_status == 409
    assert marker.exists()
    assert not paths.ip_conf_path("alpha").exists()
    await _assert_no_rows(test_db)


async def test_tree_appearing_after_precheck_is_not_deleted(make_deployer, paths, tmp_path, test_db):
    """Another deploy of the same name generates its tree between our check and our build."""
    shell = BuildChainShell(str(tmp_path / "build_chain.sh"), paths)
    created = []

    class ConcurrentWinner:
        async def build_chain(self, encrypt_type, ip_conf, chain_name):
            created.append(_existing_tree(paths))
            await shell.build_chain(encrypt_type, ip_conf, chain_name)

    deployer = make_deployer(runner=ConcurrentWinner())
    with pytest.raises(ChainRootExistsError):
        await deployer.generate_chain_config(make_deploy_request(), DockerImageType.PULL)

    assert created[0].exists()
    await _assert_no_rows(test_db)


async def test_build_shell_refuses_existing_root(paths, tmp_path):
    paths.chain_root("alpha").mkdir(parents=True)
    shell = BuildChainShell(str(tmp_path / "build_chain.sh"), paths)
    with pytest.raises(ChainRootExistsError):
        await shell.build_chain(EncryptType.ECDSA, ["10.0.0.1:2 0 1"], "alpha")
    assert not paths.ip_conf_path("alpha").exists()
