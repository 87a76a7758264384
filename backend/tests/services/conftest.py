"""Service test fixtures — async DB, fake host collaborators, FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - Orchestrators get a DatabaseSessionManager bound to that database
    - Every test gets its own FrontGroupMapCache and DeletionGuard (no cross-test state)
    - Generated chain files live under tmp_path/NODES_ROOT

Design Decisions:
    - File-backed SQLite instead of :memory: — orchestrators open several sessions
      and each must see the others' commits
    - FakeBuildRunner writes real node directories (config.ini + conf/node.nodeid) so
      the real PathService, NodeConfigFileReader and FrontYamlRenderer are exercised
    - Host/image/health fakes are plain classes satisfying the Protocols
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from chainmgr.api import dependencies
from chainmgr.core.deletion_guard import DeletionGuard
from chainmgr.db.base import Base
from chainmgr.infrastructure.database import (
    DatabaseSessionManager, get_db, get_db_manager,
)
from chainmgr.infrastructure.front_config_renderer import FrontYamlRenderer
from chainmgr.infrastructure.node_config import NodeConfigFileReader
from chainmgr.infrastructure.path_service import PathService
import chainmgr.infrastructure.database as db_module
from chainmgr.main import app
from chainmgr.services.deploy_chain import ChainDeployer
from chainmgr.services.front_group_map_service import FrontGroupMapCache
from chainmgr.services.remove_chain import ChainRemover

from tests.services.fakes import (
    DEFAULT_FRONT_PORT, FakeBuildRunner, FakeHealthProbe, FakeHostChecker,
    FakeImageChecker, RecordingResetSignal, make_deploy_request,
)


# ─── Database ────────────────────────────────────────────────────

@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def db_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine (no pool arguments)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


# ─── Collaborators ───────────────────────────────────────────────

@pytest.fixture
def cache():
    return FrontGroupMapCache()


@pytest.fixture
def guard():
    return DeletionGuard()


@pytest.fixture
def paths(tmp_path):
    return PathService(str(tmp_path / "NODES_ROOT"))


@pytest.fixture
def host_checker():
    return FakeHostChecker()


@pytest.fixture
def image_checker():
    return FakeImageChecker()


@pytest.fixture
def build_runner(paths):
    return FakeBuildRunner(paths)


@pytest.fixture
def health_probe():
    return FakeHealthProbe()


@pytest.fixture
def reset_signal():
    return RecordingResetSignal()


@pytest.fixture
def make_deployer(db_manager, host_checker, image_checker, build_runner, paths, cache):
    """Factory: ChainDeployer with overridable paths/renderer."""
    def _make(deploy_paths=None, front_renderer=None, runner=None):
        deploy_paths = deploy_paths or paths
        return ChainDeployer(
            db_manager,
            host_checker=host_checker,
            image_checker=image_checker,
            build_runner=runner or build_runner,
            paths=deploy_paths,
            node_reader=NodeConfigFileReader(),
            front_renderer=front_renderer or FrontYamlRenderer(),
            default_front_port=DEFAULT_FRONT_PORT,
            cache=cache,
        )
    return _make


@pytest.fixture
def deployer(make_deployer):
    return make_deployer()


@pytest.fixture
def remover(db_manager, paths, reset_signal, cache, guard):
    return ChainRemover(db_manager, paths, reset_signal, cache=cache, guard=guard)


@pytest.fixture
async def deployed_chain(deployer):
    """Chain 7 'alpha' deployed across two hosts (3 + 2 nodes)."""
    return await deployer.generate_chain_config(
        make_deploy_request(), make_deploy_request().docker_image_type,
    )


# ─── HTTP ────────────────────────────────────────────────────────

@pytest.fixture
async def client(test_session_factory, db_manager, deployer, remover, health_probe):
    """FastAPI test client with DB and orchestrator dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_manager] = lambda: db_manager
    app.dependency_overrides[dependencies.get_chain_deployer] = lambda: deployer
    app.dependency_overrides[dependencies.get_chain_remover] = lambda: remover
    app.dependency_overrides[dependencies.get_health_probe] = lambda: health_probe

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
