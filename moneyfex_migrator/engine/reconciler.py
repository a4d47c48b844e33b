"""
Transaction identity reconciliation.

Every legacy transfer table numbers its own rows, so a card payment that
says "transaction 101" is ambiguous until the legacy id is traced back to a
receipt number and from there to the unified transaction.
"""
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from moneyfex_migrator.models import Transaction
from moneyfex_migrator.utils.db_compat import table_columns
from moneyfex_migrator.utils.legacy_row import LegacyValueError, normalize_int, normalize_text
from moneyfex_migrator.utils.logger import get_logger

logger = get_logger(__name__)

# (legacy table, legacy id column, receipt column), in precedence order: later wins
LEGACY_TRANSFER_TABLES: Tuple[Tuple[str, str, str], ...] = (
    ("BankAccountDeposit", "TransactionId", "ReceiptNo"),
    ("MobileMoneyTransfer", "Id", "ReceiptNo"),
    ("FaxingNonCardTransaction", "Id", "ReceiptNumber"),
)


class TransactionReconciler:
    """Builds and queries the legacy transaction id -> unified transaction id map"""

    def __init__(self, source_engine: AsyncEngine, target_engine: AsyncEngine, tables=LEGACY_TRANSFER_TABLES):
        self.source_engine = source_engine
        self.target_engine = target_engine
        self.tables = tables
        self.mapping: Dict[int, int] = {}
        self.collisions = 0

    async def _load_receipts(self) -> Dict[str, int]:
        async with self.target_engine.connect() as conn:
            result = await conn.execute(select(Transaction.receipt_no, Transaction.id))
            return {receipt: tx_id for receipt, tx_id in result.all()}

    async def _legacy_pairs(self, table: str, id_column: str, receipt_column: str) -> Iterable[Tuple[int, str]]:
        pairs = []
        async with self.source_engine.connect() as conn:
            columns = await table_columns(conn, table)
            if columns is None or id_column.lower() not in columns or receipt_column.lower() not in columns:
                logger.warning(f"Reconciliation: {table} has no {id_column}/{receipt_column}, skipped")
                return pairs

            result = await conn.stream(text(f"SELECT {id_column}, {receipt_column} FROM {table}"))
            async for legacy_id, receipt in result:
                try:
                    legacy_id = normalize_int(legacy_id)
                except LegacyValueError as e:
                    logger.warning(f"Reconciliation: {table} id {legacy_id!r} ignored: {e}")
                    continue
                receipt = normalize_text(receipt)
                if legacy_id is None or not receipt:
                    continue
                pairs.append((legacy_id, receipt.strip()))
        return pairs

    async def build(self) -> Dict[int, int]:
        """Join legacy (id, receipt) pairs to target (receipt, id) pairs"""
        receipts = await self._load_receipts()
        mapping: Dict[int, int] = {}
        collisions = 0

        for table, id_column, receipt_column in self.tables:
            for legacy_id, receipt in await self._legacy_pairs(table, id_column, receipt_column):
                tx_id = receipts.get(receipt)
                if tx_id is None:
                    continue
                if legacy_id in mapping and mapping[legacy_id] != tx_id:
                    collisions += 1
                    logger.debug(
                        f"Legacy id {legacy_id} from {table} ({receipt}) replaces transaction {mapping[legacy_id]}"
                    )
                mapping[legacy_id] = tx_id

        if collisions:
            logger.warning(f"Reconciliation: {collisions} legacy ids collide across transfer tables; later table wins")

        self.mapping = mapping
        self.collisions = collisions
        logger.info(f"Reconciliation map built: {len(mapping)} legacy ids, {len(receipts)} target transactions")
        return mapping

    def resolve(
        self,
        card_transaction_id: Optional[int],
        non_card_transaction_id: Optional[int],
        top_up_transaction_id: Optional[int],
    ) -> Optional[int]:
        """First hit among card, non-card, top-up legacy ids; None when none resolves"""
        for legacy_id in (card_transaction_id, non_card_transaction_id, top_up_transaction_id):
            if legacy_id is not None and legacy_id in self.mapping:
                return self.mapping[legacy_id]
        return None
