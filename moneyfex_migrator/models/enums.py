"""
Canonical enumerations.

Values are stored as integers in the canonical schema; the web application
reads them back with the same numbering.
"""
from enum import IntEnum


class TransactionStatus(IntEnum):
    IN_PROGRESS = 0
    PAID = 1
    CANCELLED = 2
    FAILED = 3
    PAYMENT_PENDING = 4
    ID_CHECK_IN_PROGRESS = 5
    REFUND = 6
    FULL_REFUND = 7
    PARTIAL_REFUND = 8
    ABNORMAL = 9
    NOT_RECEIVED = 10
    RECEIVED = 11
    COMPLETED = 12
    HELD = 13
    PAUSED = 14


class PaymentMode(IntEnum):
    CARD = 0
    BANK_ACCOUNT = 1
    MOBILE_WALLET = 2
    CASH = 3


class TransactionModule(IntEnum):
    """Who performed the transaction"""
    SENDER = 0
    CARD_USER = 1
    BUSINESS_MERCHANT = 2
    AGENT = 3
    ADMIN_STAFF = 4
    KIIPAY_BUSINESS = 5
    KIIPAY_PERSONAL = 6


class ReasonForTransfer(IntEnum):
    NON = 0
    FOR_EDUCATION = 1
    TO_PAY_FOR_SERVICES = 2
    FOR_CHARITY_DONATION = 3
    FOR_AN_INVESTMENT = 4
    FOR_FAMILY_SUPPORT = 5
    SENDING_TO_MYSELF = 6


class CardProcessorApi(IntEnum):
    SELECT = 0
    TRUST_PAYMENT = 1
    T365 = 2
    WORLD_PAY = 3


class ApiService(IntEnum):
    VGG = 0
    TRANSFER_ZERO = 1
    EMERGENT_API = 2
    MTN = 3
    ZENITH = 4
    MAGMA = 9
    WARI = 99
