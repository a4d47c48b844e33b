"""
Post-migration validation.

Compares legacy and target row counts and checks the target for broken
references and duplicate receipts. Read-only on both stores.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from moneyfex_migrator.database import Base
from moneyfex_migrator.models import Transaction
from moneyfex_migrator.utils.db_compat import table_columns
from moneyfex_migrator.utils.logger import get_logger

logger = get_logger(__name__)

DETAIL_TABLES = ("bank_account_deposits", "mobile_money_transfers", "cash_pickups", "kiibank_transfers")

# (legacy table, soft-delete column, value kept, target table)
TABLE_PAIRS: Tuple[Tuple[str, Optional[str], int, str], ...] = (
    ("Country", "IsDeleted", 0, "countries"),
    ("Bank", "IsDeleted", 0, "banks"),
    ("MobileWalletOperator", "IsDeleted", 0, "mobile_wallet_operators"),
    ("StaffInformation", None, 0, "staff"),
    ("FaxerInformation", "IsDeleted", 0, "senders"),
    ("FaxerLogin", "IsActive", 1, "sender_logins"),
    ("Recipients", "IsDeleted", 0, "recipients"),
    ("ReceiversDetails", None, 0, "receiver_details"),
    ("BankAccountDeposit", None, 0, "bank_account_deposits"),
    ("MobileMoneyTransfer", None, 0, "mobile_money_transfers"),
    ("FaxingNonCardTransaction", None, 0, "cash_pickups"),
    ("KiiBankTransfer", None, 0, "kiibank_transfers"),
    ("CardTopUpCreditDebitInformation", None, 0, "card_payment_information"),
    ("ReinitializeTransaction", None, 0, "reinitialize_transactions"),
)


@dataclass
class TableCount:
    legacy_table: str
    legacy_count: Optional[int]
    target_table: str
    target_count: int

    @property
    def matches(self) -> bool:
        return self.legacy_count == self.target_count


@dataclass
class ValidationReport:
    counts: List[TableCount] = field(default_factory=list)
    # Integrity failures: any entry fails the report
    errors: List[str] = field(default_factory=list)
    # Count mismatches and missing legacy tables; skipped rows are legitimate
    warnings: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def log(self, log: logging.Logger = logger) -> None:
        log.info("Validation: row counts (legacy -> target)")
        for c in self.counts:
            legacy = "n/a" if c.legacy_count is None else c.legacy_count
            log.info(f"  {c.legacy_table:34} {legacy!s:>8} -> {c.target_table:28} {c.target_count:>8}")
        for warning in self.warnings:
            log.warning(f"Validation: {warning}")
        for error in self.errors:
            log.error(f"Validation: {error}")
        log.info(f"Validation {'passed' if self.passed else 'FAILED'}")


async def _legacy_count(source_engine: AsyncEngine, table: str, filter_column: Optional[str], value: int):
    async with source_engine.connect() as conn:
        columns = await table_columns(conn, table)
        if columns is None:
            return None
        query = f"SELECT COUNT(*) FROM {table}"
        if filter_column and filter_column.lower() in columns:
            query += f" WHERE {filter_column} = {int(value)}"
        return (await conn.execute(text(query))).scalar_one()


async def check_row_counts(source_engine: AsyncEngine, target_engine: AsyncEngine, report: ValidationReport):
    async with target_engine.connect() as conn:
        target_counts = {}
        for _, _, _, target_table in TABLE_PAIRS:
            table = Base.metadata.tables[target_table]
            target_counts[target_table] = (await conn.execute(select(func.count()).select_from(table))).scalar_one()

    for legacy_table, filter_column, value, target_table in TABLE_PAIRS:
        legacy_count = await _legacy_count(source_engine, legacy_table, filter_column, value)
        count = TableCount(legacy_table, legacy_count, target_table, target_counts[target_table])
        report.counts.append(count)
        if legacy_count is None:
            report.warnings.append(f"legacy table {legacy_table} not found")
        elif not count.matches:
            report.warnings.append(
                f"{legacy_table} has {legacy_count} rows, {target_table} has {count.target_count}"
            )


async def check_duplicate_receipts(target_engine: AsyncEngine, report: ValidationReport):
    stmt = (
        select(Transaction.receipt_no, func.count())
        .group_by(Transaction.receipt_no)
        .having(func.count() > 1)
    )
    async with target_engine.connect() as conn:
        for receipt_no, count in (await conn.execute(stmt)).all():
            report.errors.append(f"receipt number {receipt_no} appears {count} times in transactions")


async def check_foreign_keys(target_engine: AsyncEngine, report: ValidationReport):
    """Every non-null foreign key must resolve; detail rows must have their transaction"""
    async with target_engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            for fk in table.foreign_keys:
                child = fk.parent
                parent = fk.column
                stmt = (
                    select(func.count())
                    .select_from(table.outerjoin(parent.table, child == parent))
                    .where(child.isnot(None))
                    .where(parent.is_(None))
                )
                dangling = (await conn.execute(stmt)).scalar_one()
                if not dangling:
                    continue
                if table.name in DETAIL_TABLES and child.name == "transaction_id":
                    report.errors.append(f"{dangling} orphan rows in {table.name} without a transaction")
                else:
                    report.errors.append(
                        f"{dangling} rows in {table.name}.{child.name} reference missing {parent.table.name}"
                    )


async def validate_migration(source_engine: AsyncEngine, target_engine: AsyncEngine) -> ValidationReport:
    """Run every check and return the report"""
    report = ValidationReport()
    await check_row_counts(source_engine, target_engine, report)
    await check_duplicate_receipts(target_engine, report)
    await check_foreign_keys(target_engine, report)
    return report
