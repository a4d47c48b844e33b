from moneyfex_migrator.models.reference import Country, Bank, MobileWalletOperator, Staff
from moneyfex_migrator.models.sender import Sender, SenderLogin, Recipient, ReceiverDetail
from moneyfex_migrator.models.transaction import (
    Transaction,
    BankAccountDeposit,
    MobileMoneyTransfer,
    CashPickup,
    KiiBankTransfer,
    CardPaymentInformation,
    ReinitializeTransaction,
)

__all__ = [
    "Country",
    "Bank",
    "MobileWalletOperator",
    "Staff",
    "Sender",
    "SenderLogin",
    "Recipient",
    "ReceiverDetail",
    "Transaction",
    "BankAccountDeposit",
    "MobileMoneyTransfer",
    "CashPickup",
    "KiiBankTransfer",
    "CardPaymentInformation",
    "ReinitializeTransaction",
]
