"""
Migration orchestrator.

Runs the three phases strictly in order. Later phases check their foreign
keys against what earlier phases committed, so nothing runs concurrently.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy.ext.asyncio import AsyncEngine

from moneyfex_migrator.config import Settings, get_settings
from moneyfex_migrator.database import create_source_engine, create_target_engine
from moneyfex_migrator.engine.resolver import KeyResolver
from moneyfex_migrator.engine.validation import validate_migration
from moneyfex_migrator.migrators import (
    BankDepositMigrator,
    BankMigrator,
    BaseMigrator,
    CardPaymentMigrator,
    CashPickupMigrator,
    CountryMigrator,
    KiiBankMigrator,
    MigratorResult,
    MobileMoneyMigrator,
    ReceiverDetailMigrator,
    RecipientMigrator,
    ReinitializeMigrator,
    SenderLoginMigrator,
    SenderMigrator,
    StaffMigrator,
    WalletOperatorMigrator,
)
from moneyfex_migrator.utils.logger import get_logger

logger = get_logger(__name__)


class Phase(str, Enum):
    REFERENCE_DATA = "reference_data"
    USER_DATA = "user_data"
    TRANSACTION_DATA = "transaction_data"


class MigrationState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


PHASES: Sequence[Tuple[Phase, Sequence[Type[BaseMigrator]]]] = (
    (Phase.REFERENCE_DATA, (CountryMigrator, BankMigrator, WalletOperatorMigrator, StaffMigrator)),
    (Phase.USER_DATA, (SenderMigrator, SenderLoginMigrator, RecipientMigrator, ReceiverDetailMigrator)),
    (
        Phase.TRANSACTION_DATA,
        (
            BankDepositMigrator,
            MobileMoneyMigrator,
            CashPickupMigrator,
            KiiBankMigrator,
            CardPaymentMigrator,
            ReinitializeMigrator,
        ),
    ),
)


@dataclass
class MigrationResult:
    """Outcome of a full run; counts are partial when the run failed"""
    success: bool = False
    state: MigrationState = MigrationState.NOT_STARTED
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: timedelta = timedelta(0)
    error_message: Optional[str] = None
    failed_phase: Optional[Phase] = None
    record_counts: Dict[str, int] = field(default_factory=dict)
    skipped: int = 0
    warnings: int = 0
    validation_passed: Optional[bool] = None

    def add(self, migrator_result: MigratorResult) -> None:
        for name, count in migrator_result.counts.items():
            self.record_counts[name] = self.record_counts.get(name, 0) + count
        self.skipped += migrator_result.skipped
        self.warnings += migrator_result.warnings


class MigrationOrchestrator:
    """Drive all migrators, phase by phase"""

    def __init__(
        self,
        source_engine: AsyncEngine,
        target_engine: AsyncEngine,
        batch_size: int = 1000,
        enable_validation: bool = True,
        phases=PHASES,
    ):
        self.source_engine = source_engine
        self.target_engine = target_engine
        self.batch_size = batch_size
        self.enable_validation = enable_validation
        self.phases = phases
        self.state = MigrationState.NOT_STARTED
        self.current_phase: Optional[Phase] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MigrationOrchestrator":
        settings = settings or get_settings()
        return cls(
            create_source_engine(settings),
            create_target_engine(settings),
            batch_size=settings.BATCH_SIZE,
            enable_validation=settings.ENABLE_VALIDATION,
        )

    async def run_phase(self, phase: Phase, migrator_classes, result: MigrationResult) -> None:
        self.current_phase = phase
        logger.info(f"Phase {phase.value}: starting")

        # Fresh snapshot per phase; kinds load on first use
        resolver = KeyResolver(self.target_engine, phase.value)
        for migrator_cls in migrator_classes:
            migrator = migrator_cls(
                self.source_engine, self.target_engine, resolver, batch_size=self.batch_size
            )
            result.add(await migrator.migrate())

        logger.info(f"Phase {phase.value}: completed")

    async def run(self) -> MigrationResult:
        result = MigrationResult(start_time=datetime.utcnow())
        self.state = MigrationState.RUNNING
        result.state = self.state

        logger.info("=" * 60)
        logger.info("MoneyFex data migration started")
        logger.info("=" * 60)

        try:
            for phase, migrator_classes in self.phases:
                await self.run_phase(phase, migrator_classes, result)
        except Exception as e:
            self.state = MigrationState.FAILED
            result.success = False
            result.failed_phase = self.current_phase
            result.error_message = f"{type(e).__name__}: {e}"
            logger.exception(f"Migration failed during {self.current_phase.value if self.current_phase else '-'}")
        else:
            self.state = MigrationState.COMPLETED
            result.success = True

        result.state = self.state
        result.end_time = datetime.utcnow()
        result.duration = result.end_time - result.start_time

        if result.success and self.enable_validation:
            try:
                report = await validate_migration(self.source_engine, self.target_engine)
            except Exception:
                logger.exception("Validation could not be completed")
                result.validation_passed = False
            else:
                report.log(logger)
                result.validation_passed = report.passed

        logger.info(
            f"Migration {self.state.value} in {result.duration.total_seconds():.1f}s: "
            f"{sum(result.record_counts.values())} rows written, {result.skipped} skipped, "
            f"{result.warnings} warnings"
        )
        return result

    async def dispose(self) -> None:
        await self.source_engine.dispose()
        await self.target_engine.dispose()


def summarize(result: MigrationResult) -> List[str]:
    """Human-readable summary lines for the console"""
    lines = [
        "=" * 60,
        f"Migration {'SUCCEEDED' if result.success else 'FAILED'} ({result.state.value})",
        "=" * 60,
        f"Duration: {result.duration.total_seconds():.1f}s",
    ]
    if result.error_message:
        lines.append(f"Error: {result.error_message}")
        if result.failed_phase:
            lines.append(f"Failed phase: {result.failed_phase.value}")
    lines.append("Record counts:")
    for name, count in result.record_counts.items():
        lines.append(f"  {name}: {count}")
    lines.append(f"Skipped rows: {result.skipped}")
    lines.append(f"Warnings: {result.warnings}")
    if result.validation_passed is not None:
        lines.append(f"Validation: {'passed' if result.validation_passed else 'FAILED'}")
    return lines
