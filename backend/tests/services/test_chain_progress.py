"""Chain Tracker — progress percentages and run_task eligibility.

Invariants:
    - Failed statuses → 0, RUNNING → 100, neither touches the health probe
    - In-progress chains report 10..99 from front status + live health
    - run_task: False while guard held or chain missing; True for MANUALLY; else iff RUNNING
"""

from chainmgr.core.domain_types import (
    ChainStatus, DeployType, FrontStatus,
    PERCENTAGE_FAILED, PERCENTAGE_FINISH, PERCENTAGE_IN_PROGRESS,
)
from chainmgr.models.chain import Chain
from chainmgr.models.front import Front
from chainmgr.services.chain_progress import ChainTracker


def _chain(status: ChainStatus, deploy_type: DeployType = DeployType.API) -> Chain:
    return Chain(
        chain_id=3, chain_name="gamma", version="v2.9.1", encrypt_type=0,
        chain_status=status.value, deploy_type=deploy_type.value,
    )


async def test_failed_statuses_report_zero_without_probing(test_db, health_probe):
    tracker = ChainTracker(test_db, health_probe)
    for status in (ChainStatus.DEPLOY_FAILED, ChainStatus.UPGRADE_FAILED):
        assert await tracker.progress(_chain(status)) == PERCENTAGE_FAILED
    assert health_probe.calls == []


async def test_running_reports_finish_without_probing(test_db, health_probe):
    tracker = ChainTracker(test_db, health_probe)
    assert await tracker.progress(_chain(ChainStatus.RUNNING)) == PERCENTAGE_FINISH
    assert health_probe.calls == []


async def test_chain_without_fronts_is_in_progress(test_db, health_probe):
    tracker = ChainTracker(test_db, health_probe)
    assert await tracker.progress(_chain(ChainStatus.DEPLOYING)) == PERCENTAGE_IN_PROGRESS


async def test_deployed_chain_progress_grows_with_healthy_fronts(
    deployed_chain, test_db, health_probe,
):
    tracker = ChainTracker(test_db, health_probe)
    none_up = await tracker.progress(deployed_chain)

    health_probe.healthy.update({("10.0.0.1", 5002), ("10.0.0.1", 5003)})
    some_up = await tracker.progress(deployed_chain)

    assert len(health_probe.calls) == 10
    assert none_up == PERCENTAGE_IN_PROGRESS
    assert PERCENTAGE_IN_PROGRESS < some_up < PERCENTAGE_FINISH


async def test_in_progress_never_reaches_finish(deployed_chain, test_db, health_probe):
    for ip, count in (("10.0.0.1", 3), ("10.0.0.2", 2)):
        for index in range(count):
            health_probe.healthy.add((ip, 5002 + index))
    progress = await ChainTracker(test_db, health_probe).progress(deployed_chain)
    assert progress == PERCENTAGE_FINISH - 1


async def test_probe_errors_count_as_unhealthy(deployed_chain, test_db, health_probe):
    async def broken(ip, port):
        raise ConnectionError("refused")

    health_probe.is_healthy = broken
    progress = await ChainTracker(test_db, health_probe).progress(deployed_chain)
    assert progress == PERCENTAGE_IN_PROGRESS


async def test_starting_fronts_count_half(deployed_chain, test_db):
    await test_db.execute(
        Front.__table__.update().values(front_status=FrontStatus.STARTING.value),
    )
    await test_db.commit()
    progress = await ChainTracker(test_db).progress(deployed_chain)
    assert progress == PERCENTAGE_IN_PROGRESS + round((PERCENTAGE_FINISH - 1 - PERCENTAGE_IN_PROGRESS) * 0.5)


def test_run_task_rules(test_db, guard):
    tracker = ChainTracker(test_db, guard=guard)
    assert tracker.run_task(None) is False
    assert tracker.run_task(_chain(ChainStatus.RUNNING)) is True
    assert tracker.run_task(_chain(ChainStatus.DEPLOYING)) is False
    assert tracker.run_task(_chain(ChainStatus.DEPLOY_FAILED)) is False
    assert tracker.run_task(_chain(ChainStatus.DEPLOYING, DeployType.MANUALLY)) is True


def test_run_task_false_for_every_chain_while_deleting(test_db, guard):
    tracker = ChainTracker(test_db, guard=guard)
    with guard.hold():
        assert tracker.run_task(_chain(ChainStatus.RUNNING)) is False
        assert tracker.run_task(_chain(ChainStatus.RUNNING, DeployType.MANUALLY)) is False
    assert tracker.run_task(_chain(ChainStatus.RUNNING)) is True
