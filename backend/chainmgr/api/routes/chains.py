"""Chain Routes — deploy, register, inspect, track and remove chains.

Invariants:
    - Deploy and remove delegate to ChainDeployer/ChainRemover (they own transactions)
    - Unknown chain ids on reads raise ResourceNotFoundError (404 via global handler)
    - DELETE is idempotent: unknown ids return removed=false, not 404
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.api.dependencies import (
    get_chain_deployer, get_chain_remover, get_health_probe,
)
from chainmgr.core.collaborator_protocols import FrontHealthProbe
from chainmgr.core.errors import ResourceNotFoundError
from chainmgr.infrastructure.database import get_db
from chainmgr.models.chain import Chain
from chainmgr.schemas.chain import ChainInfo, ChainResponse, ProgressResponse
from chainmgr.schemas.deploy import ReqDeploy
from chainmgr.services.chain_progress import ChainTracker
from chainmgr.services.chain_registry import ChainRegistry
from chainmgr.services.deploy_chain import ChainDeployer
from chainmgr.services.remove_chain import ChainRemover

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/chains", tags=["chains"])


async def get_chain_or_404(chain_id: int, db: AsyncSession) -> Chain:
    chain = await ChainRegistry(db).get(chain_id)
    if chain is None:
        raise ResourceNotFoundError("Chain", str(chain_id))
    return chain


@router.post(
    "/deploy", response_model=ChainResponse,
    status_code=status.HTTP_201_CREATED,
)
async def deploy_chain(
    body: ReqDeploy, deployer: ChainDeployer = Depends(get_chain_deployer),
):
    """Generate config on all hosts and create the chain records."""
    return await deployer.generate_chain_config(body, body.docker_image_type)


@router.post(
    "", response_model=ChainResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_chain(body: ChainInfo, db: AsyncSession = Depends(get_db)):
    """Register a manually deployed chain."""
    chain = await ChainRegistry(db).new_chain(body)
    await db.commit()
    return chain


@router.get("", response_model=list[ChainResponse])
async def list_chains(db: AsyncSession = Depends(get_db)):
    return await ChainRegistry(db).list_chains()


@router.get("/{chain_id}", response_model=ChainResponse)
async def get_chain(chain_id: int, db: AsyncSession = Depends(get_db)):
    return await get_chain_or_404(chain_id, db)


@router.get("/{chain_id}/progress", response_model=ProgressResponse)
async def chain_progress(
    chain_id: int,
    db: AsyncSession = Depends(get_db),
    probe: FrontHealthProbe = Depends(get_health_probe),
):
    chain = await get_chain_or_404(chain_id, db)
    progress = await ChainTracker(db, probe).progress(chain)
    return ProgressResponse(
        chain_id=chain.chain_id, chain_status=chain.chain_status, progress=progress,
    )


@router.delete("/{chain_id}")
async def remove_chain(
    chain_id: int, remover: ChainRemover = Depends(get_chain_remover),
):
    removed = await remover.remove_chain(chain_id)
    return {"chain_id": chain_id, "removed": removed}
