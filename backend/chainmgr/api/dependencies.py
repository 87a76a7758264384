"""API Dependencies — wires settings-driven adapters into the orchestrators.

Invariants:
    - Stateful adapters (paths, build shell, health probe) are built once per process
      from Settings (lru_cache)
    - Orchestrators receive the DatabaseSessionManager, never a request session:
      they open their own transactions
    - The reset-group-list task lives on app.state (started by the lifespan)

Design Decisions:
    - Plain factory functions used with Depends(): tests override them via
      app.dependency_overrides
"""

from functools import lru_cache

from fastapi import Depends, Request

from chainmgr.config import get_settings
from chainmgr.infrastructure.build_chain_shell import BuildChainShell
from chainmgr.infrastructure.database import DatabaseSessionManager, get_db_manager
from chainmgr.infrastructure.docker_client import DockerImageChecker
from chainmgr.infrastructure.front_config_renderer import FrontYamlRenderer
from chainmgr.infrastructure.front_health import HttpFrontHealthProbe
from chainmgr.infrastructure.node_config import NodeConfigFileReader
from chainmgr.infrastructure.path_service import PathService
from chainmgr.infrastructure.ssh_client import SshHostChecker
from chainmgr.services.deploy_chain import ChainDeployer
from chainmgr.services.remove_chain import ChainRemover


@lru_cache
def get_path_service() -> PathService:
    return PathService(get_settings().nodes_root)


@lru_cache
def get_build_chain_shell() -> BuildChainShell:
    """Shared so concurrent deploys serialize on one build lock."""
    settings = get_settings()
    return BuildChainShell(
        settings.build_chain_script, get_path_service(),
        settings.build_chain_timeout_seconds,
    )


@lru_cache
def get_health_probe() -> HttpFrontHealthProbe:
    settings = get_settings()
    return HttpFrontHealthProbe(
        settings.front_health_path, settings.front_health_timeout_seconds,
    )


def get_chain_deployer(
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
) -> ChainDeployer:
    settings = get_settings()
    paths = get_path_service()
    return ChainDeployer(
        db_manager,
        host_checker=SshHostChecker(
            settings.ssh_private_key_path, settings.ssh_connect_timeout_seconds,
        ),
        image_checker=DockerImageChecker(
            settings.docker_image_repository, settings.docker_connect_timeout_seconds,
        ),
        build_runner=get_build_chain_shell(),
        paths=paths,
        node_reader=NodeConfigFileReader(),
        front_renderer=FrontYamlRenderer(),
        default_front_port=settings.default_front_port,
    )


def get_chain_remover(
    request: Request,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
) -> ChainRemover:
    reset_task = getattr(request.app.state, "reset_group_list_task", None)
    return ChainRemover(db_manager, get_path_service(), reset_task)
