"""
Card payment information migrator.

Legacy card rows point at a transfer through one of three table-local id
spaces; the reconciler turns those into unified transaction ids. A card row
whose transfer cannot be traced is still migrated, with no transaction.
"""
from typing import Optional

from moneyfex_migrator.engine.reconciler import TransactionReconciler
from moneyfex_migrator.migrators.base import BaseMigrator
from moneyfex_migrator.models import CardPaymentInformation
from moneyfex_migrator.utils.db_compat import upsert
from moneyfex_migrator.utils.legacy_row import LegacyRow


class CardPaymentMigrator(BaseMigrator):
    name = "card_payment_information"
    source_table = "CardTopUpCreditDebitInformation"
    columns = ("Id",)
    optional_columns = (
        "CardTransactionId", "NonCardTransactionId", "TopUpSomeoneElseTransactionId",
        "NameOnCard", "CardNumber", "ExpiryDate", "IsSavedCard", "AutoRecharged",
        "TransferType", "CreatedDate",
    )

    def __init__(self, *args, reconciler: Optional[TransactionReconciler] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.reconciler = reconciler or TransactionReconciler(self.source_engine, self.target_engine)

    async def prepare(self) -> None:
        await super().prepare()
        await self.reconciler.build()

    async def migrate_row(self, row: LegacyRow):
        card_id = row.as_int("CardTransactionId")
        non_card_id = row.as_int("NonCardTransactionId")
        top_up_id = row.as_int("TopUpSomeoneElseTransactionId")

        transaction_id = self.reconciler.resolve(card_id, non_card_id, top_up_id)
        if transaction_id is None and any(i is not None for i in (card_id, non_card_id, top_up_id)):
            self.warn(row, "legacy transaction not found; card payment kept without transaction")

        transfer_type = row.as_int("TransferType")
        values = {
            "legacy_id": row.required_int("Id"),
            "transaction_id": transaction_id,
            "card_transaction_id": card_id,
            "non_card_transaction_id": non_card_id,
            "top_up_someone_else_transaction_id": top_up_id,
            "name_on_card": row.as_text("NameOnCard"),
            "card_number": row.as_text("CardNumber"),
            "expiry_date": row.as_text("ExpiryDate"),
            "is_saved_card": row.as_bool("IsSavedCard"),
            "auto_recharged": row.as_bool("AutoRecharged"),
            "transfer_type": 0 if transfer_type is None else transfer_type,
            "created_at": self.datetime_or_now(row, "CreatedDate"),
        }
        await self.target.execute(
            upsert(self.target, CardPaymentInformation.__table__, values, ["legacy_id"], update_exclude=())
        )
        return [self.name]
