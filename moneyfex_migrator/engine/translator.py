"""
Legacy enum code -> canonical enum translation.

Legacy transfer tables reuse the same numeric codes for different meanings
(MobileMoneyTransferStatus on the transfer tables, FaxingStatus on the cash
pickup table), so status translation takes the source context. Nothing here
raises on an unknown code.
"""
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from moneyfex_migrator.models.enums import (
    ApiService,
    CardProcessorApi,
    PaymentMode,
    ReasonForTransfer,
    TransactionStatus,
)
from moneyfex_migrator.utils.legacy_row import LegacyValueError, normalize_int

E = TypeVar("E", bound=Enum)


class StatusContext(str, Enum):
    """Which legacy status enumeration a raw code belongs to"""
    TRANSFER = "transfer"        # BankAccountDeposit, MobileMoneyTransfer, KiiBankTransfer
    CASH_PICKUP = "cash_pickup"  # FaxingNonCardTransaction


TRANSFER_STATUS_MAP = {
    0: TransactionStatus.FAILED,
    1: TransactionStatus.IN_PROGRESS,
    2: TransactionStatus.PAID,
    3: TransactionStatus.CANCELLED,
    4: TransactionStatus.PAYMENT_PENDING,
    5: TransactionStatus.ID_CHECK_IN_PROGRESS,
    8: TransactionStatus.HELD,
    10: TransactionStatus.FULL_REFUND,
    11: TransactionStatus.PARTIAL_REFUND,
    12: TransactionStatus.PAUSED,
}

CASH_PICKUP_STATUS_MAP = {
    1: TransactionStatus.NOT_RECEIVED,
    2: TransactionStatus.RECEIVED,
    3: TransactionStatus.CANCELLED,
    6: TransactionStatus.COMPLETED,
    7: TransactionStatus.FULL_REFUND,
}

STATUS_MAPS = {
    StatusContext.TRANSFER: TRANSFER_STATUS_MAP,
    StatusContext.CASH_PICKUP: CASH_PICKUP_STATUS_MAP,
}

# Unknown codes (e.g. 9, which no legacy enumeration defines) are kept as in-progress
STATUS_FALLBACK = TransactionStatus.IN_PROGRESS


def _to_code(raw: Any) -> Optional[int]:
    """Raw legacy value -> int, or None when absent or not numeric at all"""
    try:
        return normalize_int(raw)
    except LegacyValueError:
        return None


def _defined(enum_cls: Type[E], code: Optional[int]) -> Optional[E]:
    if code is None:
        return None
    try:
        return enum_cls(code)
    except ValueError:
        return None


def map_status(raw: Any, context: StatusContext = StatusContext.TRANSFER) -> TransactionStatus:
    code = _to_code(raw)
    if code is None:
        return STATUS_FALLBACK
    return STATUS_MAPS[context].get(code, STATUS_FALLBACK)


def map_payment_mode(raw: Any) -> PaymentMode:
    mode = _defined(PaymentMode, _to_code(raw))
    return PaymentMode.CARD if mode is None else mode


def map_api_service(raw: Any) -> Optional[ApiService]:
    return _defined(ApiService, _to_code(raw))


def map_reason_for_transfer(raw: Any) -> Optional[ReasonForTransfer]:
    return _defined(ReasonForTransfer, _to_code(raw))


def map_card_processor_api(raw: Any) -> Optional[CardProcessorApi]:
    return _defined(CardProcessorApi, _to_code(raw))
