from moneyfex_migrator.migrators.base import BaseMigrator, MigratorResult
from moneyfex_migrator.migrators.reference import (
    CountryMigrator,
    BankMigrator,
    WalletOperatorMigrator,
    StaffMigrator,
)
from moneyfex_migrator.migrators.users import (
    SenderMigrator,
    SenderLoginMigrator,
    RecipientMigrator,
    ReceiverDetailMigrator,
)
from moneyfex_migrator.migrators.transfers import (
    BankDepositMigrator,
    MobileMoneyMigrator,
    CashPickupMigrator,
    KiiBankMigrator,
)
from moneyfex_migrator.migrators.card_payments import CardPaymentMigrator
from moneyfex_migrator.migrators.reinitialize import ReinitializeMigrator

__all__ = [
    "BaseMigrator",
    "MigratorResult",
    "CountryMigrator",
    "BankMigrator",
    "WalletOperatorMigrator",
    "StaffMigrator",
    "SenderMigrator",
    "SenderLoginMigrator",
    "RecipientMigrator",
    "ReceiverDetailMigrator",
    "BankDepositMigrator",
    "MobileMoneyMigrator",
    "CashPickupMigrator",
    "KiiBankMigrator",
    "CardPaymentMigrator",
    "ReinitializeMigrator",
]
