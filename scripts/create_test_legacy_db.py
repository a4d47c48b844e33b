"""
Create a mock legacy MoneyFex SQLite database for trying the migration.
Uses the test legacy schema and seeds every table the migration reads,
including a few rows that the migration is expected to skip or repair.

Usage:
    python scripts/create_test_legacy_db.py
    SOURCE_DATABASE_URL=sqlite:///scripts/moneyfex_legacy_test.db moneyfex-migrate run
"""
import random
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = "scripts/moneyfex_legacy_test.db"
SCHEMA = Path(__file__).parent.parent / "moneyfex_migrator" / "tests" / "legacy_schema.sql"

TRANSFER_STATUSES = [0, 1, 2, 2, 2, 3, 4, 5, 8, 10, 11, 12, 99]
CASH_PICKUP_STATUSES = [1, 2, 2, 3, 6, 7]


def create_test_db():
    Path(DB_PATH).unlink(missing_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.executescript(SCHEMA.read_text())
    cursor = conn.cursor()
    random.seed(7)

    # Reference data
    cursor.executemany(
        "INSERT INTO Country (CountryCode, CountryName, Currency, CurrencySymbol, IsDeleted) VALUES (?, ?, ?, ?, ?)",
        [
            ("GB", "United Kingdom", "GBP", "£", 0),
            ("NG", "Nigeria", "NGN", "₦", 0),
            ("GH", "Ghana", "GHS", "₵", 0),
            ("KE", "Kenya", "KES", "KSh", 0),
            ("ZW", "Zimbabwe", "ZWL", "Z$", 1),  # soft-deleted
        ]
    )
    cursor.executemany(
        "INSERT INTO Bank (Id, Name, Code, CountryCode, IsDeleted) VALUES (?, ?, ?, ?, ?)",
        [
            (1, "Access Bank", "044", "NG", 0),
            (2, "GTBank", "058", "NG", 0),
            (3, "Ecobank Ghana", "130", "GH", 0),
            (4, "Old Bank", "999", "ZW", 1),
        ]
    )
    cursor.executemany(
        "INSERT INTO MobileWalletOperator (Id, Code, Name, Country, MobileNetworkCode, PayoutProviderId, IsDeleted) VALUES (?, ?, ?, ?, ?, ?, ?)",
        [
            (1, "MTN", "MTN Mobile Money", "GH", "01", 3, 0),
            (2, "VODA", "Vodafone Cash", "GH", "02", 3, 0),
            (3, "MPESA", "M-Pesa", "KE", "63", 5, 0),
        ]
    )
    cursor.executemany(
        "INSERT INTO StaffInformation (Id, FirstName, MiddleName, LastName, EmailAddress) VALUES (?, ?, ?, ?, ?)",
        [
            (1, "Grace", None, "Mensah", "grace@moneyfex.com"),
            (2, "Tunde", "A", "Bello", "tunde@moneyfex.com"),
        ]
    )

    # Senders, one soft-deleted, one reusing an account number
    senders_data = []
    for i in range(1, 21):
        created = datetime(2023, 1, 1) + timedelta(days=random.randint(0, 365))
        senders_data.append((
            i, f"Sender{i}", None, f"Test{i}", f"sender{i}@example.com",
            f"+4470000000{i:02d}", f"MF{1000 + i}", "1 High Street", None, "London", None,
            "GB", "E1 6AN", 0, created.isoformat(sep=" "), 0,
        ))
    senders_data.append((
        21, "Duplicate", None, "Account", "dup@example.com", None, "MF1001",
        None, None, None, None, "GB", None, 0, None, 0,
    ))
    senders_data.append((
        22, "Deleted", None, "Sender", "deleted@example.com", None, "MF9999",
        None, None, None, None, "GB", None, 0, None, 1,
    ))
    cursor.executemany(
        "INSERT INTO FaxerInformation (Id, FirstName, MiddleName, LastName, Email, PhoneNumber, AccountNo, Address1, Address2, City, State, Country, PostalCode, IsBusiness, CreatedDate, IsDeleted) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        senders_data
    )
    cursor.executemany(
        "INSERT INTO FaxerLogin (FaxerId, IsActive) VALUES (?, ?)",
        [(i, 1 if i % 5 else 0) for i in range(1, 21)]
    )

    cursor.executemany(
        "INSERT INTO Recipients (Id, ReceiverName, IsDeleted) VALUES (?, ?, ?)",
        [(i, f"Recipient {i}", 0) for i in range(1, 11)]
    )
    cursor.executemany(
        "INSERT INTO ReceiversDetails (Id, FirstName, MiddleName, LastName, PhoneNumber, City, Country) VALUES (?, ?, ?, ?, ?, ?, ?)",
        [(i, f"Receiver{i}", None, "Pickup", f"+2348000000{i:02d}", "Lagos", "NG") for i in range(1, 6)]
    )

    # Transfers: every legacy table mints its own ids
    def transfer(i, prefix):
        sending = round(random.uniform(20, 500), 2)
        fee = round(sending * 0.02, 2)
        rate = round(random.uniform(400, 1900), 6)
        date = datetime(2024, 1, 1) + timedelta(hours=random.randint(0, 24 * 200))
        sender_id = random.randint(1, 20)
        return {
            "receipt": f"{prefix}-{i:05d}",
            "date": date.isoformat(sep=" "),
            "sender": sender_id,
            "sending": sending,
            "fee": fee,
            "total": None if i % 7 == 0 else round(sending + fee, 2),
            "receiving": round(sending * rate, 2),
            "rate": rate,
            "staff": random.choice([None, 1, 2, 42]),
        }

    deposits_data = []
    for i in range(1, 31):
        t = transfer(i, "BD")
        deposits_data.append((
            1000 + i, t["receipt"], t["date"], t["sender"], "GB", "NG", "GBP", "NGN",
            t["sending"], t["receiving"], t["fee"], t["total"], t["rate"],
            random.choice([0, 1]), random.choice(TRANSFER_STATUSES), t["staff"],
            random.choice([1, 2, 999]), "Access Bank", f"0{random.randint(100000000, 999999999)}",
            f"Receiver {i}", random.choice([None, 1, 2, 5]),
        ))
    # Unknown sender: skipped
    deposits_data.append((
        2000, "BD-99999", "2024-03-01 12:00:00", 404, "GB", "NG", "GBP", "NGN",
        10, 15000, 1, 11, 1500, 0, 2, None, 1, "Access Bank", "0123456789", "Nobody", None,
    ))
    cursor.executemany(
        "INSERT INTO BankAccountDeposit (TransactionId, ReceiptNo, TransactionDate, SenderId, SendingCountry, ReceivingCountry, SendingCurrency, ReceivingCurrency, SendingAmount, ReceivingAmount, Fee, TotalAmount, ExchangeRate, SenderPaymentMode, Status, PayingStaffId, BankId, BankName, ReceiverAccountNo, ReceiverName, ReasonForTransfer) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        deposits_data
    )

    mobile_data = []
    for i in range(1, 21):
        t = transfer(i, "MM")
        mobile_data.append((
            i, t["receipt"], t["date"], t["sender"], "GB", "GH", "GBP", "GHS",
            t["sending"], t["receiving"], t["fee"], t["total"], t["rate"],
            random.choice(TRANSFER_STATUSES), t["staff"],
            random.choice([1, 2, 3, 77]), f"+23320000{i:04d}", f"Wallet Owner {i}",
        ))
    cursor.executemany(
        "INSERT INTO MobileMoneyTransfer (Id, ReceiptNo, TransactionDate, SenderId, SendingCountry, ReceivingCountry, SendingCurrency, ReceivingCurrency, SendingAmount, ReceivingAmount, Fee, TotalAmount, ExchangeRate, Status, PayingStaffId, WalletOperatorId, PaidToMobileNo, ReceiverName) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        mobile_data
    )

    pickups_data = []
    for i in range(1, 16):
        t = transfer(i, "CP")
        pickups_data.append((
            i, t["receipt"], t["date"], t["sender"], "GB", "NG", "GBP", "NGN",
            t["sending"], t["receiving"], t["fee"], t["total"], t["rate"],
            random.choice(CASH_PICKUP_STATUSES), f"MF{random.randint(10000000, 99999999)}",
            random.randint(1, 12), random.randint(1, 6), "Agent Desk", random.randint(0, 6),
        ))
    cursor.executemany(
        "INSERT INTO FaxingNonCardTransaction (Id, ReceiptNumber, TransactionDate, SenderId, SendingCountry, ReceivingCountry, SendingCurrency, ReceivingCurrency, FaxingAmount, ReceivingAmount, FaxingFee, TotalAmount, ExchangeRate, FaxingStatus, MFCN, RecipientId, NonCardRecieverId, AgentStaffName, Reason) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        pickups_data
    )

    kiibank_data = []
    for i in range(1, 11):
        t = transfer(i, "KB")
        kiibank_data.append((
            i, t["receipt"], t["date"], t["sender"], "GB", "NG", "GBP", "NGN",
            t["sending"], t["receiving"], t["fee"], t["total"], t["rate"],
            random.choice(TRANSFER_STATUSES), f"KII{i:06d}", f"Kii Receiver {i}",
            f"KTR{i:06d}", random.choice([None, 1, 2, 3, 50]),
        ))
    cursor.executemany(
        "INSERT INTO KiiBankTransfer (Id, ReceiptNo, TransactionDate, SenderId, SendingCountry, ReceivingCountry, SendingCurrency, ReceivingCurrency, SendingAmount, ReceivingAmount, Fee, TotalAmount, ExchangeRate, Status, AccountNo, ReceiverName, TransactionReference, RecipientId) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        kiibank_data
    )

    # Card payments point at whichever legacy table minted the transfer
    cards_data = []
    for i in range(1, 26):
        card_id = non_card_id = top_up_id = None
        kind = i % 4
        if kind == 0:
            card_id = 1000 + random.randint(1, 30)
        elif kind == 1:
            non_card_id = random.randint(1, 20)
        elif kind == 2:
            top_up_id = random.randint(1, 15)
        else:
            card_id = 50000 + i  # never minted
        cards_data.append((
            i, card_id, non_card_id, top_up_id, f"CARD HOLDER {i}", f"**** **** **** {1000 + i}",
            f"{random.randint(1, 12):02d}/{random.randint(25, 30)}", random.choice([0, 1]), 0,
            random.choice([1, 2, 3]), "2024-02-01 10:00:00",
        ))
    cursor.executemany(
        "INSERT INTO CardTopUpCreditDebitInformation (Id, CardTransactionId, NonCardTransactionId, TopUpSomeoneElseTransactionId, NameOnCard, CardNumber, ExpiryDate, IsSavedCard, AutoRecharged, TransferType, CreatedDate) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        cards_data
    )

    reinitialized_data = [
        (i, f"BD-{i:05d}", f"BD-{i:05d}-R", "2024-05-01 09:00:00", random.choice([1, 2, 42]), "Ops Desk")
        for i in range(1, 6)
    ]
    cursor.executemany(
        "INSERT INTO ReinitializeTransaction (Id, ReceiptNo, NewReceiptNo, Date, CreatedById, CreatedByName) VALUES (?, ?, ?, ?, ?, ?)",
        reinitialized_data
    )

    conn.commit()
    conn.close()

    print(f"Test legacy MoneyFex database created: {DB_PATH}")
    print(f"  Countries: 5 (1 soft-deleted)")
    print(f"  Banks: 4 (1 soft-deleted)")
    print(f"  Senders: {len(senders_data)}")
    print(f"  Bank deposits: {len(deposits_data)}")
    print(f"  Mobile money transfers: {len(mobile_data)}")
    print(f"  Cash pickups: {len(pickups_data)}")
    print(f"  KiiBank transfers: {len(kiibank_data)}")
    print(f"  Card payments: {len(cards_data)}")
    print(f"  Reinitialised transactions: {len(reinitialized_data)}")


if __name__ == "__main__":
    create_test_db()
