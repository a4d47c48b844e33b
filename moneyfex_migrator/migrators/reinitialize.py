"""
Reinitialised transaction audit trail migrator
"""
from moneyfex_migrator.engine.resolver import KeyKind
from moneyfex_migrator.migrators.base import BaseMigrator
from moneyfex_migrator.models import ReinitializeTransaction
from moneyfex_migrator.utils.db_compat import upsert
from moneyfex_migrator.utils.legacy_row import LegacyRow, none_if_blank


class ReinitializeMigrator(BaseMigrator):
    name = "reinitialize_transactions"
    source_table = "ReinitializeTransaction"
    columns = ("ReceiptNo", "NewReceiptNo")
    optional_columns = ("Id", "Date", "CreatedById", "CreatedByName")
    key_columns = ("NewReceiptNo",)
    required_keys = (KeyKind.STAFF,)

    async def migrate_row(self, row: LegacyRow):
        new_receipt_no = none_if_blank(row.as_text("NewReceiptNo"))
        if new_receipt_no is None:
            raise self.skip(row, "empty new receipt number")

        values = {
            "receipt_no": row.as_text("ReceiptNo", default="").strip(),
            "new_receipt_no": new_receipt_no,
            "created_by_id": self.optional_ref(row, KeyKind.STAFF, row.as_int("CreatedById"), "CreatedById"),
            "created_by_name": row.as_text("CreatedByName"),
            "created_at": self.datetime_or_now(row, "Date"),
        }
        await self.target.execute(
            upsert(self.target, ReinitializeTransaction.__table__, values, ["new_receipt_no"], update_exclude=())
        )
        return [self.name]
