"""Chain Deployer — turns a multi-host deploy request into generated files plus DB records.

Invariants:
    - Validation (node count, id, name), host checks and the free-chain-root check run
      before any side effect
    - build_chain runs exactly once per deploy, for the whole topology
    - init_chain_records runs in ONE transaction: chain, default group, and one
      front/node/mapping triple per generated node directory, or nothing
    - A chain root that already exists is never deleted: it was not generated by this run
    - If build or init fails, the generated chain tree is deleted before the error
      surfaces; if that deletion fails, ChainCleanupError replaces the original error
    - Front config files written for earlier nodes are removed by the same deletion

Design Decisions:
    - init_chain_records is a plain method with its own transaction scope:
      generate_chain_config calls it directly
    - Collaborators injected as Protocols: the deployer never knows about
      paramiko, docker or bash
    - build_chain treated as all-or-nothing: a failed run is cleaned up like a failed init
"""

import logging

from chainmgr.core.collaborator_protocols import (
    BuildChainRunner, ChainPaths, FrontConfigRenderer, HostChecker,
    ImageChecker, NodeConfig, NodeConfigReader,
)
from chainmgr.core.domain_types import (
    ChainStatus, DataStatus, DeployType, DockerImageType, EncryptType,
    FrontStatus, GroupType, DEFAULT_GROUP_ID, DEFAULT_GROUP_NAME, MIN_CHAIN_NODES,
)
from chainmgr.core.errors import (
    ChainCleanupError, ChainRootExistsError, ErrorContext, FrontConfigRenderError, HostConnectError,
    ImageNotExistsError, InsufficientNodesError, ListHostNodeDirError,
)
from chainmgr.core import naming
from chainmgr.infrastructure.database import DatabaseSessionManager
from chainmgr.models.chain import Chain
from chainmgr.models.front import Front
from chainmgr.schemas.deploy import DeployHost, ReqDeploy
from chainmgr.services.chain_registry import ChainRegistry
from chainmgr.services.front_group_map_service import (
    FrontGroupMapCache, FrontGroupMapService, front_group_map_cache,
)
from chainmgr.services.front_service import FrontService
from chainmgr.services.group_service import GroupService
from chainmgr.services.node_service import NodeService

logger = logging.getLogger(__name__)


class ChainDeployer:
    """Deploys a new chain: host checks -> build_chain -> DB records, with compensation."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        host_checker: HostChecker,
        image_checker: ImageChecker,
        build_runner: BuildChainRunner,
        paths: ChainPaths,
        node_reader: NodeConfigReader,
        front_renderer: FrontConfigRenderer,
        default_front_port: int,
        cache: FrontGroupMapCache = front_group_map_cache,
    ):
        self._db_manager = db_manager
        self._host_checker = host_checker
        self._image_checker = image_checker
        self._build_runner = build_runner
        self._paths = paths
        self._node_reader = node_reader
        self._front_renderer = front_renderer
        self._default_front_port = default_front_port
        self._cache = cache

    async def generate_chain_config(
        self, deploy: ReqDeploy, image_type: DockerImageType,
    ) -> Chain:
        """Deploy a chain end-to-end; returns the INITIALIZED chain row."""
        total = deploy.total_node_count()
        if total < MIN_CHAIN_NODES:
            raise InsufficientNodesError(total, MIN_CHAIN_NODES)

        async with self._db_manager.session() as db:
            await ChainRegistry(db).check_unused(deploy.chain_id, deploy.chain_name)

        ip_conf = [
            await self._check_host(host, deploy.version, image_type)
            for host in deploy.deploy_host_list
        ]

        chain_root = self._paths.chain_root(deploy.chain_name)
        if chain_root.exists():
            raise ChainRootExistsError(
                deploy.chain_name, str(chain_root), ErrorContext(chain_id=deploy.chain_id),
            )

        try:
            await self._build_runner.build_chain(
                deploy.encrypt_type, ip_conf, deploy.chain_name,
            )
            chain = await self.init_chain_records(
                deploy.encrypt_type, deploy.version, deploy,
            )
        except ChainRootExistsError:
            raise
        except Exception:
            logger.error(
                f"Init chain:[{deploy.chain_name}] failed, remove generated files:"
                f"[{self._paths.chain_root(deploy.chain_name)}]",
                exc_info=True,
                extra={"chain_id": deploy.chain_id, "chain_name": deploy.chain_name},
            )
            await self._delete_generated(deploy)
            raise

        self._cache.clear_map_list(chain.chain_id)
        logger.info(
            f"Chain:[{chain.chain_name}] deployed with {total} nodes",
            extra={"chain_id": chain.chain_id, "node_count": total},
        )
        return chain

    async def init_chain_records(
        self, encrypt_type: EncryptType, version: str, deploy: ReqDeploy,
    ) -> Chain:
        """Insert the chain and all per-node records in one transaction."""
        async with self._db_manager.transaction() as db:
            chain = await ChainRegistry(db).insert(
                deploy.chain_id, deploy.chain_name, deploy.description, version,
                encrypt_type, ChainStatus.INITIALIZED, deploy.consensus_type,
                deploy.storage_type, DeployType.API,
            )
            groups = GroupService(db)
            fronts = FrontService(db)
            nodes = NodeService(db)
            mappings = FrontGroupMapService(db, self._cache)

            for host in deploy.deploy_host_list:
                await groups.save_group(
                    DEFAULT_GROUP_ID, chain.chain_id, 0,
                    DEFAULT_GROUP_NAME, GroupType.DEPLOY,
                )
                try:
                    node_dirs = await self._paths.list_host_node_dirs(
                        chain.chain_name, host.ip,
                    )
                except OSError as e:
                    logger.error(f"List node dirs of host:[{host.ip}] failed: {e}")
                    raise ListHostNodeDirError(
                        host.ip, ErrorContext(chain_id=chain.chain_id),
                    ) from e

                for node_dir in node_dirs:
                    node_config = await self._node_reader.read(node_dir, encrypt_type)
                    front_port = naming.front_port(
                        self._default_front_port, node_config.host_index,
                    )
                    front = await fronts.insert(
                        _build_front(chain, host, node_config, front_port, version),
                    )
                    await nodes.insert(
                        chain.chain_id, node_config.node_id, DEFAULT_GROUP_ID,
                        host.ip, node_config.p2p_port, DataStatus.INVALID,
                    )
                    await mappings.new_front_group(
                        chain.chain_id, front.front_id, DEFAULT_GROUP_ID,
                    )
                    try:
                        await self._front_renderer.render(
                            node_dir, int(encrypt_type),
                            node_config.channel_port, front_port,
                        )
                    except OSError as e:
                        logger.error(f"Render front config in [{node_dir}] failed: {e}")
                        raise FrontConfigRenderError(
                            str(node_dir), ErrorContext(chain_id=chain.chain_id, host=host.ip),
                        ) from e

                group = await groups.get_group(chain.chain_id, DEFAULT_GROUP_ID)
                await groups.update_group_node_count(
                    chain.chain_id, DEFAULT_GROUP_ID, group.node_count + host.num,
                )
            return chain

    async def _check_host(
        self, host: DeployHost, version: str, image_type: DockerImageType,
    ) -> str:
        """Verify one host and return its build_chain ipconf line."""
        if not await self._host_checker.check_connect(host.ip, host.ssh_user, host.ssh_port):
            raise HostConnectError(host.ip)
        if image_type == DockerImageType.MANUAL:
            exists = await self._image_checker.image_exists(
                host.ip, host.docker_demon_port, host.ssh_user, host.ssh_port, version,
            )
            if not exists:
                logger.error(
                    f"Docker image:[{version}] not exists on host:[{host.ip}]",
                    extra={"host": host.ip},
                )
                raise ImageNotExistsError(host.ip, version)
        return naming.ip_config_line(host.ip, host.num, host.ext_org_id, DEFAULT_GROUP_ID)

    async def _delete_generated(self, deploy: ReqDeploy) -> None:
        try:
            await self._paths.delete_chain(deploy.chain_name)
        except OSError as e:
            logger.critical(
                f"Delete chain:[{deploy.chain_name}] directory failed after init error: {e}",
                extra={"chain_id": deploy.chain_id, "chain_name": deploy.chain_name},
            )
            raise ChainCleanupError(
                deploy.chain_name, ErrorContext(chain_id=deploy.chain_id),
            ) from e


def _build_front(
    chain: Chain, host: DeployHost, node_config: NodeConfig,
    front_port: int, version: str,
) -> Front:
    chain_root = naming.chain_root_on_host(host.root_dir_on_host, chain.chain_name)
    return Front(
        chain_id=chain.chain_id,
        node_id=node_config.node_id,
        front_ip=host.ip,
        front_port=front_port,
        jsonrpc_port=node_config.jsonrpc_port,
        p2p_port=node_config.p2p_port,
        channel_port=node_config.channel_port,
        chain_name=chain.chain_name,
        ext_company_id=host.ext_company_id,
        ext_org_id=host.ext_org_id,
        ext_host_id=host.ext_host_id,
        agency=str(host.ext_org_id),
        description=naming.front_description(chain.chain_id, host.ip, node_config.host_index),
        front_status=FrontStatus.INITIALIZED.value,
        version=version,
        container_name=naming.container_name(
            host.root_dir_on_host, chain.chain_name, node_config.host_index,
        ),
        host_index=node_config.host_index,
        ssh_user=host.ssh_user,
        ssh_port=host.ssh_port,
        docker_port=host.docker_demon_port,
        root_on_host=host.root_dir_on_host,
        node_root_on_host=naming.node_root_on_host(chain_root, node_config.host_index),
    )
