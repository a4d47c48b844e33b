"""
User data migrators: senders, sender logins, recipients, receiver details
"""
from moneyfex_migrator.engine.resolver import KeyKind
from moneyfex_migrator.migrators.base import BaseMigrator
from moneyfex_migrator.models import ReceiverDetail, Recipient, Sender, SenderLogin
from moneyfex_migrator.utils.db_compat import upsert
from moneyfex_migrator.utils.legacy_row import LegacyRow, full_name, none_if_blank


class SenderMigrator(BaseMigrator):
    name = "senders"
    source_table = "FaxerInformation"
    columns = ("Id", "FirstName", "LastName", "Email")
    optional_columns = (
        "MiddleName", "PhoneNumber", "AccountNo", "Address1", "Address2",
        "City", "State", "Country", "PostalCode", "IsBusiness", "CreatedDate",
    )
    filter_column = "IsDeleted"
    required_keys = (KeyKind.COUNTRY,)

    async def migrate_row(self, row: LegacyRow):
        country = none_if_blank(row.as_text("Country"))

        now = self.now()
        values = {
            "id": row.required_int("Id"),
            "first_name": row.as_text("FirstName", default=""),
            "middle_name": row.as_text("MiddleName"),
            "last_name": row.as_text("LastName", default=""),
            "email": row.as_text("Email", default=""),
            "phone_number": row.as_text("PhoneNumber"),
            # Blank account numbers would collide on the unique index
            "account_no": none_if_blank(row.as_text("AccountNo")),
            "address1": row.as_text("Address1"),
            "address2": row.as_text("Address2"),
            "city": row.as_text("City"),
            "state": row.as_text("State"),
            "country_code": self.optional_ref(row, KeyKind.COUNTRY, country, "Country"),
            "postal_code": row.as_text("PostalCode"),
            "is_business": row.as_bool("IsBusiness"),
            "is_active": True,
            "created_at": self.datetime_or_now(row, "CreatedDate"),
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, Sender.__table__, values, ["id"]))
        return [self.name]


class SenderLoginMigrator(BaseMigrator):
    name = "sender_logins"
    source_table = "FaxerLogin"
    columns = ("FaxerId", "IsActive")
    key_columns = ("FaxerId",)
    filter_column = "IsActive"
    filter_value = 1
    required_keys = (KeyKind.SENDER,)

    async def migrate_row(self, row: LegacyRow):
        sender_id = self.required_ref(row, KeyKind.SENDER, row.as_int("FaxerId"), "FaxerId")

        now = self.now()
        values = {
            "sender_id": sender_id,
            "is_active": row.as_bool("IsActive", default=True),
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, SenderLogin.__table__, values, ["sender_id"]))
        return [self.name]


class RecipientMigrator(BaseMigrator):
    name = "recipients"
    source_table = "Recipients"
    columns = ("Id", "ReceiverName")
    filter_column = "IsDeleted"

    async def migrate_row(self, row: LegacyRow):
        values = {
            "id": row.required_int("Id"),
            "receiver_name": row.as_text("ReceiverName", default=""),
            "created_at": self.now(),
        }
        await self.target.execute(upsert(self.target, Recipient.__table__, values, ["id"]))
        return [self.name]


class ReceiverDetailMigrator(BaseMigrator):
    name = "receiver_details"
    source_table = "ReceiversDetails"
    columns = ("Id", "FirstName", "LastName")
    optional_columns = ("MiddleName", "PhoneNumber", "City", "Country")
    required_keys = (KeyKind.COUNTRY,)

    async def migrate_row(self, row: LegacyRow):
        country = none_if_blank(row.as_text("Country"))

        now = self.now()
        values = {
            "id": row.required_int("Id"),
            "full_name": full_name(
                row.as_text("FirstName"), row.as_text("MiddleName"), row.as_text("LastName")
            ),
            "phone_number": row.as_text("PhoneNumber"),
            "city": row.as_text("City"),
            "country_code": self.optional_ref(row, KeyKind.COUNTRY, country, "Country"),
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, ReceiverDetail.__table__, values, ["id"]))
        return [self.name]
