"""
Transfer migrators.

Each legacy transfer table becomes one row in `transactions` plus one row in
the matching detail table. The parent is written first; a rejected parent
(unknown sender) means no detail. The detail runs in its own SAVEPOINT, so a
rejected detail leaves the parent in place.
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import DataError, IntegrityError

from moneyfex_migrator.engine.resolver import KeyKind
from moneyfex_migrator.engine.translator import (
    StatusContext,
    map_api_service,
    map_card_processor_api,
    map_payment_mode,
    map_reason_for_transfer,
    map_status,
)
from moneyfex_migrator.errors import RowSkipped
from moneyfex_migrator.migrators.base import BaseMigrator
from moneyfex_migrator.models import (
    BankAccountDeposit,
    CashPickup,
    KiiBankTransfer,
    MobileMoneyTransfer,
    Recipient,
    Transaction,
)
from moneyfex_migrator.models.enums import TransactionModule
from moneyfex_migrator.utils.db_compat import upsert
from moneyfex_migrator.utils.legacy_row import LegacyRow, LegacyValueError, none_if_blank

ZERO = Decimal("0")

# Column-name variants across the legacy transfer tables, first present wins
RECEIPT = ("ReceiptNo", "ReceiptNumber")
SENDING_AMOUNT = ("SendingAmount", "FaxingAmount")
FEE = ("Fee", "FaxingFee")
STATUS = ("Status", "FaxingStatus")
REASON = ("ReasonForTransfer", "Reason")
UPDATE_DATE = ("TransactionUpdateDate", "StatusChangedDate")
PAYING_STAFF_NAME = ("PayingStaffName", "AgentStaffName")
UPDATED_BY = ("UpdateByStaffId", "UpdatedByStaffId")

# Transaction columns any transfer table may or may not carry
TRANSACTION_COLUMNS = (
    "TransactionDate", "SendingCountry", "ReceivingCountry", "SendingCurrency", "ReceivingCurrency",
    "SendingAmount", "FaxingAmount", "ReceivingAmount", "Fee", "FaxingFee", "TotalAmount",
    "ExchangeRate", "PaymentReference", "SenderPaymentMode", "Status", "FaxingStatus",
    "PayingStaffId", "Apiservice", "AgentCommission", "ExtraFee", "Margin", "MFRate",
    "TransferZeroSenderId", "TransferReference", "ReasonForTransfer", "Reason", "CardProcessorApi",
    "IsFromMobile", "TransactionUpdateDate", "StatusChangedDate", "IsComplianceNeededForTrans",
    "IsComplianceApproved", "ComplianceApprovedBy", "ComplianceApprovedDate",
    "PayingStaffName", "AgentStaffName", "UpdateByStaffId", "UpdatedByStaffId",
)


def _enum_value(member) -> Optional[int]:
    return None if member is None else int(member)


class TransferMigrator(BaseMigrator):
    """Shared parent-transaction handling for the four transfer tables"""

    id_column = "Id"
    receipt_column = "ReceiptNo"
    status_context = StatusContext.TRANSFER
    detail_table = None
    detail_columns = ()
    detail_keys = ()

    def __init__(self, *args, **kwargs):
        self.columns = (self.id_column, self.receipt_column, "SenderId")
        candidates = dict.fromkeys(TRANSACTION_COLUMNS + tuple(self.detail_columns))
        self.optional_columns = tuple(c for c in candidates if c not in self.columns)
        self.key_columns = (self.id_column, self.receipt_column)
        self.required_keys = (KeyKind.SENDER, KeyKind.STAFF, KeyKind.COUNTRY) + tuple(self.detail_keys)
        super().__init__(*args, **kwargs)

    # ---- parent ------------------------------------------------------------

    def transaction_values(self, row: LegacyRow, receipt_no: str, sender_id: int) -> Dict[str, Any]:
        now = self.now()
        staff = KeyKind.STAFF

        sending_amount = row.as_decimal(*SENDING_AMOUNT)
        sending_amount = ZERO if sending_amount is None else sending_amount
        fee = row.as_decimal(*FEE)
        fee = ZERO if fee is None else fee
        total_amount = row.as_decimal("TotalAmount")
        if total_amount is None:
            total_amount = sending_amount + fee
        receiving_amount = row.as_decimal("ReceivingAmount")
        exchange_rate = row.as_decimal("ExchangeRate")

        sending_country = none_if_blank(row.as_text("SendingCountry"))
        receiving_country = none_if_blank(row.as_text("ReceivingCountry"))

        return {
            "receipt_no": receipt_no,
            "transaction_date": self.datetime_or_now(row, "TransactionDate"),
            "sender_id": sender_id,
            "sending_country_code": self.optional_ref(row, KeyKind.COUNTRY, sending_country, "SendingCountry"),
            "receiving_country_code": self.optional_ref(row, KeyKind.COUNTRY, receiving_country, "ReceivingCountry"),
            "sending_currency": row.as_text("SendingCurrency", default=""),
            "receiving_currency": row.as_text("ReceivingCurrency", default=""),
            "sending_amount": sending_amount,
            "receiving_amount": ZERO if receiving_amount is None else receiving_amount,
            "fee": fee,
            "total_amount": total_amount,
            "exchange_rate": ZERO if exchange_rate is None else exchange_rate,
            "agent_commission": row.as_decimal("AgentCommission"),
            "extra_fee": row.as_decimal("ExtraFee"),
            "margin": row.as_decimal("Margin"),
            "mf_rate": row.as_decimal("MFRate"),
            "sender_payment_mode": int(map_payment_mode(row.get("SenderPaymentMode"))),
            "transaction_module": int(TransactionModule.SENDER),
            "status": int(map_status(row.get(*STATUS), self.status_context)),
            "api_service": _enum_value(map_api_service(row.get("Apiservice"))),
            "reason_for_transfer": _enum_value(map_reason_for_transfer(row.get(*REASON))),
            "card_processor_api": _enum_value(map_card_processor_api(row.get("CardProcessorApi"))),
            "payment_reference": row.as_text("PaymentReference"),
            "transfer_reference": row.as_text("TransferReference"),
            "transfer_zero_sender_id": row.as_text("TransferZeroSenderId"),
            "is_from_mobile": row.as_bool("IsFromMobile"),
            "is_compliance_needed": row.as_bool("IsComplianceNeededForTrans"),
            "is_compliance_approved": row.as_bool("IsComplianceApproved"),
            "compliance_approved_by": self.optional_ref(
                row, staff, row.as_int("ComplianceApprovedBy"), "ComplianceApprovedBy"
            ),
            "compliance_approved_at": row.as_datetime("ComplianceApprovedDate"),
            "paying_staff_id": self.optional_ref(row, staff, row.as_int("PayingStaffId"), "PayingStaffId"),
            "paying_staff_name": row.as_text(*PAYING_STAFF_NAME),
            "updated_by_staff_id": self.optional_ref(row, staff, row.as_int(*UPDATED_BY), "UpdatedByStaffId"),
            "transaction_update_date": row.as_datetime(*UPDATE_DATE),
            "created_at": now,
            "updated_at": now,
        }

    async def upsert_transaction(self, row: LegacyRow) -> int:
        """Write the unified transaction and return its id"""
        receipt_no = none_if_blank(row.as_text(*RECEIPT))
        if receipt_no is None:
            raise self.skip(row, "empty receipt number")

        sender_id = self.required_ref(row, KeyKind.SENDER, row.as_int("SenderId"), "SenderId")

        values = self.transaction_values(row, receipt_no, sender_id)
        stmt = upsert(self.target, Transaction.__table__, values, ["receipt_no"], returning=Transaction.__table__.c.id)
        result = await self.target.execute(stmt)
        return result.scalar_one()

    # ---- detail ------------------------------------------------------------

    async def detail_values(self, row: LegacyRow, transaction_id: int) -> Dict[str, Any]:
        raise NotImplementedError

    async def upsert_detail(self, row: LegacyRow, transaction_id: int) -> bool:
        try:
            async with self.target.begin_nested():
                values = await self.detail_values(row, transaction_id)
                await self.target.execute(
                    upsert(self.target, self.detail_table.__table__, values, ["transaction_id"])
                )
        except RowSkipped as e:
            self.warn(row, f"{self.name} row not written, transaction {transaction_id} kept: {e.reason}")
            return False
        except (IntegrityError, DataError) as e:
            self.warn(row, f"{self.name} row not written, transaction {transaction_id} kept: {e.orig}")
            return False
        except LegacyValueError as e:
            self.warn(row, f"{self.name} row not written, transaction {transaction_id} kept: {e}")
            return False
        return True

    async def migrate_row(self, row: LegacyRow):
        transaction_id = await self.upsert_transaction(row)
        written = ["transactions"]
        if await self.upsert_detail(row, transaction_id):
            written.append(self.name)
        return written


class BankDepositMigrator(TransferMigrator):
    name = "bank_account_deposits"
    source_table = "BankAccountDeposit"
    id_column = "TransactionId"
    detail_table = BankAccountDeposit
    detail_columns = (
        "BankId", "BankName", "BankCode", "ReceiverAccountNo", "ReceiverName", "ReceiverCity",
        "IsManualDeposit", "IsManualApproveNeeded", "ManuallyApproved", "IsEuropeTransfer",
        "IsTransactionDuplicated", "DuplicateTransactionReceiptNo", "IsBusiness",
        "HasMadePaymentToBankAccount",
    )
    detail_keys = (KeyKind.BANK,)

    async def detail_values(self, row: LegacyRow, transaction_id: int):
        now = self.now()
        return {
            "transaction_id": transaction_id,
            "bank_id": self.optional_ref(row, KeyKind.BANK, row.as_int("BankId"), "BankId"),
            "bank_name": row.as_text("BankName"),
            "bank_code": row.as_text("BankCode"),
            "receiver_account_no": row.as_text("ReceiverAccountNo"),
            "receiver_name": row.as_text("ReceiverName"),
            "receiver_city": row.as_text("ReceiverCity"),
            "is_manual_deposit": row.as_bool("IsManualDeposit"),
            "is_manual_approval_needed": row.as_bool("IsManualApproveNeeded"),
            "is_manually_approved": row.as_bool("ManuallyApproved"),
            "is_europe_transfer": row.as_bool("IsEuropeTransfer"),
            "is_transaction_duplicated": row.as_bool("IsTransactionDuplicated"),
            "duplicate_transaction_receipt_no": row.as_text("DuplicateTransactionReceiptNo"),
            "is_business": row.as_bool("IsBusiness"),
            "has_made_payment_to_bank_account": row.as_bool("HasMadePaymentToBankAccount"),
            "created_at": now,
            "updated_at": now,
        }


class MobileMoneyMigrator(TransferMigrator):
    name = "mobile_money_transfers"
    source_table = "MobileMoneyTransfer"
    detail_table = MobileMoneyTransfer
    detail_columns = ("WalletOperatorId", "PaidToMobileNo", "ReceiverName", "ReceiverCity")
    detail_keys = (KeyKind.WALLET_OPERATOR,)

    async def detail_values(self, row: LegacyRow, transaction_id: int):
        wallet_operator_id = self.required_ref(
            row, KeyKind.WALLET_OPERATOR, row.as_int("WalletOperatorId"), "WalletOperatorId"
        )
        now = self.now()
        return {
            "transaction_id": transaction_id,
            "wallet_operator_id": wallet_operator_id,
            "paid_to_mobile_no": row.as_text("PaidToMobileNo", default=""),
            "receiver_name": row.as_text("ReceiverName"),
            "receiver_city": row.as_text("ReceiverCity"),
            "created_at": now,
            "updated_at": now,
        }


class CashPickupMigrator(TransferMigrator):
    name = "cash_pickups"
    source_table = "FaxingNonCardTransaction"
    receipt_column = "ReceiptNumber"
    status_context = StatusContext.CASH_PICKUP
    detail_table = CashPickup
    # NonCardRecieverId is misspelt in the legacy schema
    detail_columns = ("MFCN", "RecipientId", "NonCardRecieverId", "NonCardReceiverId", "IsApprovedByAdmin")
    detail_keys = (KeyKind.RECIPIENT, KeyKind.RECEIVER_DETAIL)

    async def detail_values(self, row: LegacyRow, transaction_id: int):
        now = self.now()
        return {
            "transaction_id": transaction_id,
            "mfcn": row.as_text("MFCN"),
            "recipient_id": self.optional_ref(row, KeyKind.RECIPIENT, row.as_int("RecipientId"), "RecipientId"),
            "non_card_receiver_id": self.optional_ref(
                row,
                KeyKind.RECEIVER_DETAIL,
                row.as_int("NonCardRecieverId", "NonCardReceiverId"),
                "NonCardRecieverId",
            ),
            "is_approved_by_admin": row.as_bool("IsApprovedByAdmin"),
            "agent_staff_name": row.as_text("AgentStaffName"),
            "created_at": now,
            "updated_at": now,
        }


class KiiBankMigrator(TransferMigrator):
    name = "kiibank_transfers"
    source_table = "KiiBankTransfer"
    detail_table = KiiBankTransfer
    detail_columns = ("AccountNo", "ReceiverName", "TransactionReference", "RecipientId")
    detail_keys = (KeyKind.RECIPIENT,)

    async def recipient_name(self, recipient_id: Optional[int]) -> Optional[str]:
        if recipient_id is None:
            return None
        result = await self.target.execute(
            select(Recipient.receiver_name).where(Recipient.id == recipient_id)
        )
        return none_if_blank(result.scalar_one_or_none())

    async def detail_values(self, row: LegacyRow, transaction_id: int):
        recipient_id = self.optional_ref(row, KeyKind.RECIPIENT, row.as_int("RecipientId"), "RecipientId")
        receiver_name = row.as_text("ReceiverName")
        owner_name = await self.recipient_name(recipient_id) or none_if_blank(receiver_name)

        # The legacy table has no bank or branch columns; detail timestamps follow the transfer date
        created = row.as_datetime("TransactionDate") or self.now()
        return {
            "transaction_id": transaction_id,
            "account_no": row.as_text("AccountNo"),
            "receiver_name": receiver_name,
            "account_owner_name": owner_name,
            "account_holder_phone_no": None,
            "bank_id": None,
            "bank_branch_id": None,
            "bank_branch_code": None,
            "transaction_reference": row.as_text("TransactionReference"),
            "created_at": created,
            "updated_at": created,
        }
