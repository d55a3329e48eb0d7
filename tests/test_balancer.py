"""Advisory workload balance report."""

import pytest

from workwell.services.balancer import WorkloadBalancer, split_excess
from workwell.services.sampling import FixedLoadSampler
from workwell.services.worker_schema import WorkerStatus

from conftest import SpyRepository, make_worker


@pytest.fixture
def fleet():
    return [
        make_worker(1, score=80, load=50, name="Ada"),
        make_worker(2, score=20, load=10, name="Ben"),
        make_worker(3, score=30, load=20, name="Cy"),
        make_worker(4, score=45, load=30, name="Di"),
        make_worker(5, score=10, load=5, name="Eve"),
    ]


def test_summary(fleet):
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(fleet)

    assert report.summary.total_workers == 5
    assert report.summary.overloaded_count == 1
    assert report.summary.total_load == 115
    assert report.summary.average_load == 23.0
    assert report.summary.redistribution_needed


def test_details_sorted_by_burnout_descending(fleet):
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(fleet)
    assert [w.id for w in report.workers] == [1, 4, 3, 2, 5]


def test_overloaded_excess_split_over_first_three_available(fleet):
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(fleet)
    ada = report.workers[0]

    assert ada.is_overloaded
    assert ada.status == WorkerStatus.OVERLOADED
    assert ada.recommended_load == 35
    assert [(t.to_id, t.to_name, t.count) for t in ada.suggested_transfers] == [
        (2, "Ben", 5),
        (3, "Cy", 5),
        (4, "Di", 5),
    ]


def test_underloaded_workers_nudged_toward_average(fleet):
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(fleet)
    by_id = {w.id: w for w in report.workers}

    # 0.7 * 23 = 16.1
    assert by_id[2].recommended_load == 15
    assert by_id[5].recommended_load == 10
    assert by_id[3].recommended_load == 20
    assert by_id[4].recommended_load == 30
    assert all(not w.suggested_transfers for w in report.workers if not w.is_overloaded)


def test_status_labels():
    workers = [
        make_worker(1, score=60, load=20),
        make_worker(2, score=50, load=20),
        make_worker(3, score=10, load=41),
    ]
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(workers)
    by_id = {w.id: w.status for w in report.workers}

    assert by_id == {
        1: WorkerStatus.AT_RISK,
        2: WorkerStatus.NORMAL,
        3: WorkerStatus.OVERLOADED,
    }


def test_no_available_workers_means_no_transfers():
    workers = [make_worker(1, score=80, load=50), make_worker(2, score=60, load=20)]
    report = WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(workers)

    overloaded = next(w for w in report.workers if w.id == 1)
    assert overloaded.suggested_transfers == []
    assert overloaded.recommended_load == 35


def test_split_excess_ceiling_division_capped_by_remaining():
    recipients = [(make_worker(i), 0) for i in (1, 2, 3)]
    assert [t.count for t in split_excess(7, recipients)] == [3, 3, 1]
    assert [t.count for t in split_excess(2, recipients)] == [1, 1]
    assert split_excess(0, recipients) == []
    assert split_excess(5, []) == []


def test_missing_load_sampled_for_report_only():
    worker = make_worker(1, score=20, load=None)
    balancer = WorkloadBalancer(SpyRepository([worker]), FixedLoadSampler(default=44))

    report = balancer.build_report([worker])

    assert report.workers[0].current_load == 44
    assert report.workers[0].is_overloaded
    assert worker.current_load is None


@pytest.mark.asyncio
async def test_balance_never_writes_or_mutates(fleet):
    repository = SpyRepository(fleet + [make_worker(6, score=90, load=None)])
    before = [w.model_dump() for w in await repository.load_all()]

    report = await WorkloadBalancer(repository, FixedLoadSampler(default=50)).balance()

    assert report.summary.total_workers == 6
    assert repository.writes == []
    assert [w.model_dump() for w in await repository.load_all()] == before


def test_build_report_leaves_input_records_intact(fleet):
    snapshot = [w.model_dump() for w in fleet]
    WorkloadBalancer(SpyRepository(), FixedLoadSampler()).build_report(fleet)
    assert [w.model_dump() for w in fleet] == snapshot


@pytest.mark.asyncio
async def test_empty_fleet_report():
    report = await WorkloadBalancer(SpyRepository(), FixedLoadSampler()).balance()

    assert report.summary.total_workers == 0
    assert report.summary.average_load == 0.0
    assert not report.summary.redistribution_needed
    assert report.workers == []


@pytest.mark.asyncio
async def test_worker_workload_view():
    repository = SpyRepository([make_worker(1, score=75, load=20), make_worker(2, score=30, load=20)])
    balancer = WorkloadBalancer(repository, FixedLoadSampler())

    high = await balancer.worker_workload(1)
    assert high.is_overloaded
    assert high.recommended_max_load == 25

    normal = await balancer.worker_workload(2)
    assert not normal.is_overloaded
    assert normal.recommended_max_load == 40

    assert await balancer.worker_workload(99) is None
