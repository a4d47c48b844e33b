"""
Test fixtures - file-backed SQLite legacy and target databases
"""
import sqlite3
from pathlib import Path

import pytest
import pytest_asyncio

from moneyfex_migrator.database import Base, create_engine_for
from moneyfex_migrator.engine.orchestrator import MigrationOrchestrator
import moneyfex_migrator.models  # noqa: F401  (registers tables on Base.metadata)

LEGACY_SCHEMA = Path(__file__).parent / "legacy_schema.sql"


class LegacyDb:
    """Seeds the legacy SQLite file with plain sqlite3"""

    def __init__(self, path: Path):
        self.path = path

    def insert(self, table: str, **values):
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with sqlite3.connect(self.path) as conn:
            conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(values.values()))

    def execute(self, sql: str, params=()):
        with sqlite3.connect(self.path) as conn:
            conn.execute(sql, params)


@pytest.fixture()
def legacy_db(tmp_path):
    path = tmp_path / "legacy.db"
    with sqlite3.connect(path) as conn:
        conn.executescript(LEGACY_SCHEMA.read_text())
    return LegacyDb(path)


@pytest_asyncio.fixture()
async def source_engine(legacy_db):
    engine = create_engine_for(f"sqlite:///{legacy_db.path}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def target_engine(tmp_path):
    """Fresh canonical schema per test; a file so every connection sees the same data"""
    engine = create_engine_for(f"sqlite:///{tmp_path / 'target.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def ng_scenario(legacy_db):
    """One country, bank, sender and bank deposit: the minimal end-to-end run"""
    legacy_db.insert("Country", CountryCode="NG", CountryName="Nigeria", Currency="NGN", CurrencySymbol="₦", IsDeleted=0)
    legacy_db.insert("Bank", Id=1, Name="Access Bank", Code="044", CountryCode="NG", IsDeleted=0)
    legacy_db.insert(
        "FaxerInformation",
        Id=10, FirstName="Ada", LastName="Obi", Email="ada@example.com",
        AccountNo="MF-10", Country="NG", IsDeleted=0,
    )
    legacy_db.insert(
        "BankAccountDeposit",
        TransactionId=101, ReceiptNo="BD-0001", TransactionDate="2024-01-05 10:00:00",
        SenderId=10, SendingCountry="NG", ReceivingCountry="NG",
        SendingCurrency="GBP", ReceivingCurrency="NGN",
        SendingAmount=100, Fee=1, TotalAmount=101, ReceivingAmount=150000, ExchangeRate=1500,
        Status=2, BankId=1, BankName="Access Bank", ReceiverAccountNo="0123456789",
        ReceiverName="Chinedu Obi",
    )
    return legacy_db


@pytest.fixture()
def run_migration(source_engine, target_engine):
    """Run the full orchestrator without post-run validation"""

    async def _run(batch_size=1000):
        orchestrator = MigrationOrchestrator(
            source_engine, target_engine, batch_size=batch_size, enable_validation=False
        )
        return await orchestrator.run()

    return _run
