"""
Base class for entity migrators.

A migrator streams one legacy table, converts each row and upserts it into
the target store. Each row runs inside its own SAVEPOINT so a rejected row
is rolled back alone; the outer transaction is committed every
`batch_size` rows.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from moneyfex_migrator.engine.resolver import KeyKind, KeyResolver
from moneyfex_migrator.errors import MigrationError, RowSkipped
from moneyfex_migrator.utils.db_compat import table_columns
from moneyfex_migrator.utils.legacy_row import LegacyRow, LegacyValueError, none_if_blank, normalize_text
from moneyfex_migrator.utils.logger import get_logger


@dataclass
class MigratorResult:
    """Outcome of one migrator run"""
    name: str
    counts: Dict[str, int] = field(default_factory=dict)
    skipped: int = 0
    warnings: int = 0

    @property
    def migrated(self) -> int:
        return self.counts.get(self.name, 0)


class BaseMigrator:
    """Stream a legacy table into the target store, one SAVEPOINT per row"""

    # Result key, normally the target table name
    name: str = ""
    source_table: str = ""
    # Columns the SELECT always asks for; the migration fails if one is absent
    columns: Sequence[str] = ()
    # Columns some legacy databases lack; selected only when present
    optional_columns: Sequence[str] = ()
    # Natural key column(s) used in log lines
    key_columns: Sequence[str] = ("Id",)
    # Soft-delete filter, applied only when the column exists
    filter_column: Optional[str] = None
    filter_value: int = 0
    # Resolver snapshots needed before the first row
    required_keys: Sequence[KeyKind] = ()

    def __init__(
        self,
        source_engine: AsyncEngine,
        target_engine: AsyncEngine,
        resolver: KeyResolver,
        batch_size: int = 1000,
    ):
        self.source_engine = source_engine
        self.target_engine = target_engine
        self.resolver = resolver
        self.batch_size = max(1, batch_size)
        self.logger = get_logger(f"migrators.{self.name}")
        self.target: Optional[AsyncConnection] = None
        self._warnings = 0

    # ---- hooks -------------------------------------------------------------

    async def prepare(self) -> None:
        """Called once before streaming; resolver snapshots are loaded here"""
        await self.resolver.preload(*self.required_keys)

    async def migrate_row(self, row: LegacyRow) -> Iterable[str]:
        """Write one row; return the names of the entities written"""
        raise NotImplementedError

    # ---- helpers -----------------------------------------------------------

    @staticmethod
    def now() -> datetime:
        return datetime.utcnow()

    def row_key(self, row: LegacyRow) -> str:
        return "/".join(str(row.get(c)) for c in self.key_columns)

    def warn(self, row: LegacyRow, message: str) -> None:
        self._warnings += 1
        self.logger.warning(f"{self.source_table} [{self.row_key(row)}]: {message}")

    def skip(self, row: LegacyRow, reason: str) -> RowSkipped:
        return RowSkipped(self.source_table, self.row_key(row), reason)

    def datetime_or_now(self, row: LegacyRow, *columns: str) -> datetime:
        """Parsed date, or the run time with a warning when the value is present but unreadable"""
        value = row.as_datetime(*columns)
        if value is not None:
            return value
        raw = row.get(*columns)
        if none_if_blank(normalize_text(raw)) is not None:
            self.warn(row, f"{'/'.join(columns)}={raw!r} is not a date; run time used")
        return self.now()

    def optional_ref(self, row: LegacyRow, kind: KeyKind, value, field_name: str):
        """Return `value` if it exists in the target, else None with a warning"""
        if value is None:
            return None
        if self.resolver.contains(kind, value):
            return value
        self.warn(row, f"{field_name}={value!r} not found in target {kind.value}; set to NULL")
        return None

    def required_ref(self, row: LegacyRow, kind: KeyKind, value, field_name: str):
        """Return `value` if it exists in the target, else skip the row"""
        if value is None or not self.resolver.contains(kind, value):
            raise self.skip(row, f"{field_name}={value!r} not found in target {kind.value}")
        return value

    async def build_query(self, source: AsyncConnection) -> str:
        available = await self._available_columns(source)

        missing = [c for c in self.columns if c.lower() not in available]
        if missing:
            raise MigrationError(f"Source table {self.source_table} is missing columns: {', '.join(missing)}")

        selected = list(self.columns) + [c for c in self.optional_columns if c.lower() in available]
        query = f"SELECT {', '.join(selected)} FROM {self.source_table}"

        if self.filter_column:
            if self.filter_column.lower() in available:
                query += f" WHERE {self.filter_column} = {int(self.filter_value)}"
            else:
                self.logger.debug(f"{self.source_table} has no {self.filter_column}; reading all rows")
        return query

    async def _available_columns(self, source: AsyncConnection) -> set:
        available = await table_columns(source, self.source_table)
        if available is None:
            raise MigrationError(f"Source table {self.source_table} not found")
        return available

    # ---- driver ------------------------------------------------------------

    async def migrate(self) -> MigratorResult:
        result = MigratorResult(self.name)
        counts: Counter = Counter()
        self._warnings = 0

        self.logger.info(f"Migrating {self.source_table} -> {self.name}...")
        await self.prepare()

        async with self.source_engine.connect() as source, self.target_engine.connect() as target:
            self.target = target
            query = await self.build_query(source)
            pending = 0

            stream = await source.stream(text(query))
            async for mapping in stream.mappings():
                row = LegacyRow(mapping, self.source_table)
                try:
                    async with target.begin_nested():
                        written = list(await self.migrate_row(row))
                    counts.update(written)
                except RowSkipped as e:
                    result.skipped += 1
                    self.logger.warning(f"Skipped {e}")
                except LegacyValueError as e:
                    result.skipped += 1
                    self.logger.warning(f"Skipped {self.source_table} [{self.row_key(row)}]: {e}")
                except IntegrityError as e:
                    result.skipped += 1
                    self.logger.warning(
                        f"Skipped {self.source_table} [{self.row_key(row)}]: constraint violation: {e.orig}"
                    )
                except DataError as e:
                    result.skipped += 1
                    self.logger.warning(f"Skipped {self.source_table} [{self.row_key(row)}]: invalid data: {e.orig}")

                pending += 1
                if pending >= self.batch_size:
                    await target.commit()
                    pending = 0

            await target.commit()
            self.target = None

        result.counts = dict(counts)
        result.counts.setdefault(self.name, 0)
        result.warnings = self._warnings
        self.logger.info(
            f"{self.name}: {result.migrated} migrated, {result.skipped} skipped, {result.warnings} warnings"
        )
        return result

