"""
Reference data migrators: countries, banks, wallet operators, staff
"""
from moneyfex_migrator.engine.resolver import KeyKind
from moneyfex_migrator.migrators.base import BaseMigrator
from moneyfex_migrator.models import Bank, Country, MobileWalletOperator, Staff
from moneyfex_migrator.utils.db_compat import upsert
from moneyfex_migrator.utils.legacy_row import LegacyRow, none_if_blank


class CountryMigrator(BaseMigrator):
    name = "countries"
    source_table = "Country"
    columns = ("CountryCode", "CountryName", "Currency", "CurrencySymbol")
    key_columns = ("CountryCode",)
    filter_column = "IsDeleted"

    async def migrate_row(self, row: LegacyRow):
        code = none_if_blank(row.as_text("CountryCode"))
        if code is None:
            raise self.skip(row, "empty country code")

        now = self.now()
        values = {
            "country_code": code,
            "country_name": row.as_text("CountryName", default=code),
            "currency": row.as_text("Currency", default=""),
            "currency_symbol": row.as_text("CurrencySymbol", default=""),
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, Country.__table__, values, ["country_code"]))
        return [self.name]


class BankMigrator(BaseMigrator):
    name = "banks"
    source_table = "Bank"
    columns = ("Id", "Name")
    optional_columns = ("Code", "CountryCode", "IsDeleted")
    filter_column = "IsDeleted"
    required_keys = (KeyKind.COUNTRY,)

    async def migrate_row(self, row: LegacyRow):
        country = none_if_blank(row.as_text("CountryCode"))

        now = self.now()
        values = {
            "id": row.required_int("Id"),
            "name": row.as_text("Name", default=""),
            "code": row.as_text("Code"),
            "country_code": self.optional_ref(row, KeyKind.COUNTRY, country, "CountryCode"),
            "is_active": not row.as_bool("IsDeleted"),
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, Bank.__table__, values, ["id"]))
        return [self.name]


class WalletOperatorMigrator(BaseMigrator):
    name = "mobile_wallet_operators"
    source_table = "MobileWalletOperator"
    columns = ("Id", "Code", "Name")
    optional_columns = ("Country", "MobileNetworkCode", "PayoutProviderId", "IsDeleted")
    filter_column = "IsDeleted"
    required_keys = (KeyKind.COUNTRY,)

    async def migrate_row(self, row: LegacyRow):
        country = none_if_blank(row.as_text("Country"))

        now = self.now()
        values = {
            "id": row.required_int("Id"),
            "code": row.as_text("Code", default=""),
            "name": row.as_text("Name", default=""),
            "country_code": self.optional_ref(row, KeyKind.COUNTRY, country, "Country"),
            "mobile_network_code": row.as_text("MobileNetworkCode"),
            "payout_provider_id": row.as_int("PayoutProviderId"),
            "is_active": not row.as_bool("IsDeleted"),
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, MobileWalletOperator.__table__, values, ["id"]))
        return [self.name]


class StaffMigrator(BaseMigrator):
    name = "staff"
    source_table = "StaffInformation"
    columns = ("Id", "FirstName", "LastName")
    optional_columns = ("MiddleName", "EmailAddress")

    async def migrate_row(self, row: LegacyRow):
        now = self.now()
        values = {
            "id": row.required_int("Id"),
            "first_name": row.as_text("FirstName", default=""),
            "middle_name": row.as_text("MiddleName"),
            "last_name": row.as_text("LastName", default=""),
            "email": row.as_text("EmailAddress", default=""),
            # StaffInformation has no soft-delete column
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        await self.target.execute(upsert(self.target, Staff.__table__, values, ["id"]))
        return [self.name]
