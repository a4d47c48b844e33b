"""
Business-key resolver.

Holds, per phase, a snapshot of the keys that already exist in the target
store so migrators can check a reference before writing it. Each kind is
read once, the first time it is asked for, and never refreshed within the
phase: rows inserted later in the same phase are not visible.
"""
from enum import Enum
from typing import Dict, FrozenSet, Hashable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from moneyfex_migrator.models import (
    Bank,
    Country,
    MobileWalletOperator,
    ReceiverDetail,
    Recipient,
    Sender,
    Staff,
)
from moneyfex_migrator.utils.logger import get_logger

logger = get_logger(__name__)


class KeyKind(str, Enum):
    STAFF = "staff"
    SENDER = "sender"
    BANK = "bank"
    WALLET_OPERATOR = "wallet_operator"
    RECIPIENT = "recipient"
    COUNTRY = "country"
    RECEIVER_DETAIL = "receiver_detail"


KEY_COLUMNS = {
    KeyKind.STAFF: Staff.id,
    KeyKind.SENDER: Sender.id,
    KeyKind.BANK: Bank.id,
    KeyKind.WALLET_OPERATOR: MobileWalletOperator.id,
    KeyKind.RECIPIENT: Recipient.id,
    KeyKind.COUNTRY: Country.country_code,
    KeyKind.RECEIVER_DETAIL: ReceiverDetail.id,
}


class KeyResolver:
    """Lazily loaded, phase-scoped snapshot of valid target keys"""

    def __init__(self, target_engine: AsyncEngine, phase: str = ""):
        self.target_engine = target_engine
        self.phase = phase
        self._snapshots: Dict[KeyKind, FrozenSet[Hashable]] = {}

    def is_loaded(self, kind: KeyKind) -> bool:
        return kind in self._snapshots

    async def valid_keys(self, kind: KeyKind) -> FrozenSet[Hashable]:
        """Return the snapshot for `kind`, reading the target on first use"""
        kind = KeyKind(kind)
        if kind not in self._snapshots:
            column = KEY_COLUMNS[kind]
            async with self.target_engine.connect() as conn:
                result = await conn.execute(select(column))
                self._snapshots[kind] = frozenset(result.scalars().all())
            logger.debug(
                f"Loaded {len(self._snapshots[kind])} {kind.value} keys for phase {self.phase or '-'}"
            )
        return self._snapshots[kind]

    async def preload(self, *kinds: KeyKind) -> None:
        for kind in kinds:
            await self.valid_keys(kind)

    def contains(self, kind: KeyKind, key) -> bool:
        """Membership test against an already-loaded snapshot"""
        if key is None:
            return False
        return key in self._snapshots[KeyKind(kind)]
