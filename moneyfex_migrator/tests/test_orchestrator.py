"""
Orchestrator run-state tests
"""
import pytest_asyncio

from moneyfex_migrator.database import create_engine_for
from moneyfex_migrator.engine.orchestrator import (
    MigrationOrchestrator,
    PHASES,
    MigrationState,
    Phase,
    summarize,
)


@pytest_asyncio.fixture()
async def empty_source(tmp_path):
    engine = create_engine_for(f"sqlite:///{tmp_path / 'empty.db'}")
    yield engine
    await engine.dispose()


async def test_unreachable_source_fails_first_phase(tmp_path, target_engine):
    source = create_engine_for(f"sqlite:///{tmp_path / 'missing' / 'legacy.db'}")
    try:
        result = await MigrationOrchestrator(source, target_engine, enable_validation=False).run()
    finally:
        await source.dispose()

    assert not result.success
    assert result.state == MigrationState.FAILED
    assert result.failed_phase == Phase.REFERENCE_DATA
    assert result.error_message
    assert result.end_time >= result.start_time


async def test_missing_legacy_table_is_fatal(empty_source, target_engine):
    result = await MigrationOrchestrator(empty_source, target_engine, enable_validation=False).run()

    assert result.state == MigrationState.FAILED
    assert result.error_message == "MigrationError: Source table Country not found"
    assert result.validation_passed is None


async def test_failure_keeps_earlier_counts(ng_scenario, source_engine, target_engine):
    ng_scenario.execute("DROP TABLE ReinitializeTransaction")

    result = await MigrationOrchestrator(source_engine, target_engine, enable_validation=False).run()

    assert result.failed_phase == Phase.TRANSACTION_DATA
    assert result.record_counts["countries"] == 1
    assert result.record_counts["transactions"] == 1
    assert any("FAILED" in line for line in summarize(result))


async def test_successful_run_validates(ng_scenario, source_engine, target_engine):
    orchestrator = MigrationOrchestrator(source_engine, target_engine, batch_size=10)

    result = await orchestrator.run()

    assert result.success
    assert result.state == MigrationState.COMPLETED
    assert orchestrator.state == MigrationState.COMPLETED
    assert result.failed_phase is None
    assert result.validation_passed is True
    assert "Validation: passed" in summarize(result)


async def test_phases_can_be_limited(ng_scenario, source_engine, target_engine):
    orchestrator = MigrationOrchestrator(
        source_engine, target_engine, enable_validation=False, phases=PHASES[:1]
    )

    result = await orchestrator.run()

    assert result.success
    assert set(result.record_counts) == {"countries", "banks", "mobile_wallet_operators", "staff"}


async def test_validation_error_still_returns_result(ng_scenario, source_engine, target_engine, monkeypatch):
    async def broken_validation(source, target):
        raise RuntimeError("target went away")

    monkeypatch.setattr("moneyfex_migrator.engine.orchestrator.validate_migration", broken_validation)

    result = await MigrationOrchestrator(source_engine, target_engine).run()

    assert result.success
    assert result.state == MigrationState.COMPLETED
    assert result.validation_passed is False
    assert "Validation: FAILED" in summarize(result)
