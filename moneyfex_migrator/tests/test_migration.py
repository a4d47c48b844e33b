"""
End-to-end migration tests: legacy SQLite -> canonical SQLite
"""
import logging
from decimal import Decimal

from sqlalchemy import func, insert, select

from moneyfex_migrator.engine.validation import validate_migration
from moneyfex_migrator.models import (
    Bank,
    BankAccountDeposit,
    CardPaymentInformation,
    CashPickup,
    Country,
    KiiBankTransfer,
    MobileMoneyTransfer,
    ReceiverDetail,
    ReinitializeTransaction,
    Sender,
    SenderLogin,
    Transaction,
)
from moneyfex_migrator.models.enums import PaymentMode, TransactionModule, TransactionStatus


async def count(engine, model):
    async with engine.connect() as conn:
        return (await conn.execute(select(func.count()).select_from(model.__table__))).scalar_one()


async def fetch_all(engine, model):
    async with engine.connect() as conn:
        return (await conn.execute(select(model.__table__))).mappings().all()


async def fetch_one(engine, model, *where):
    async with engine.connect() as conn:
        return (await conn.execute(select(model.__table__).where(*where))).mappings().one()


# ===================== END TO END =====================


class TestEndToEnd:

    async def test_ng_scenario(self, ng_scenario, run_migration, target_engine):
        result = await run_migration()

        assert result.success
        assert await count(target_engine, Country) == 1
        assert await count(target_engine, Bank) == 1
        assert await count(target_engine, Sender) == 1
        assert await count(target_engine, Transaction) == 1

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0001")
        assert tx["total_amount"] == Decimal("101")
        assert tx["sending_amount"] == Decimal("100")
        assert tx["fee"] == Decimal("1")
        assert tx["sender_id"] == 10
        assert tx["status"] == TransactionStatus.PAID
        assert tx["sender_payment_mode"] == PaymentMode.CARD
        assert tx["transaction_module"] == TransactionModule.SENDER

        deposits = await fetch_all(target_engine, BankAccountDeposit)
        assert len(deposits) == 1
        assert deposits[0]["transaction_id"] == tx["id"]
        assert deposits[0]["bank_id"] == 1

    async def test_result_counts(self, ng_scenario, run_migration):
        result = await run_migration()

        assert result.record_counts["countries"] == 1
        assert result.record_counts["transactions"] == 1
        assert result.record_counts["bank_account_deposits"] == 1
        assert result.skipped == 0
        assert result.state.value == "completed"

    async def test_rerun_is_idempotent(self, ng_scenario, run_migration, target_engine):
        await run_migration()
        first = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0001")

        result = await run_migration()
        second = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0001")

        assert result.success
        assert await count(target_engine, Country) == 1
        assert await count(target_engine, Sender) == 1
        assert await count(target_engine, Transaction) == 1
        assert await count(target_engine, BankAccountDeposit) == 1
        assert second["id"] == first["id"]
        assert second["total_amount"] == first["total_amount"]

    async def test_small_batches_commit_everything(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("Country", CountryCode="GH", CountryName="Ghana", IsDeleted=0)
        ng_scenario.insert("Country", CountryCode="KE", CountryName="Kenya", IsDeleted=0)

        result = await run_migration(batch_size=1)

        assert result.success
        assert await count(target_engine, Country) == 3


# ===================== REQUIRED REFERENCES =====================


class TestRequiredReferences:

    async def test_unknown_sender_skips_transaction(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=102, ReceiptNo="BD-0002", SenderId=999,
            SendingAmount=10, Fee=1, TotalAmount=11, BankId=1,
        )

        result = await run_migration()

        assert result.success
        assert result.skipped == 1
        assert await count(target_engine, Transaction) == 1
        async with target_engine.connect() as conn:
            found = await conn.execute(select(Transaction.id).where(Transaction.receipt_no == "BD-0002"))
            assert found.first() is None

    async def test_skipped_transaction_is_logged(self, ng_scenario, run_migration, caplog):
        ng_scenario.insert("BankAccountDeposit", TransactionId=102, ReceiptNo="BD-0002", SenderId=999)
        caplog.set_level(logging.WARNING, logger="moneyfex_migrator")

        await run_migration()

        skipped = [
            r for r in caplog.records
            if r.levelno == logging.WARNING and "BD-0002" in r.getMessage() and "SenderId" in r.getMessage()
        ]
        assert len(skipped) == 1
        assert skipped[0].name.startswith("moneyfex_migrator.migrators")

    async def test_unknown_wallet_operator_keeps_parent(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "MobileMoneyTransfer", Id=55, ReceiptNo="MM-0002", SenderId=10,
            SendingAmount=20, Fee=2, TotalAmount=22, Status=1,
            WalletOperatorId=77, PaidToMobileNo="+233200000000",
        )

        result = await run_migration()

        assert result.success
        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "MM-0002")
        assert tx["status"] == TransactionStatus.IN_PROGRESS
        assert await count(target_engine, MobileMoneyTransfer) == 0
        assert result.record_counts["mobile_money_transfers"] == 0

    async def test_known_wallet_operator_writes_detail(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("MobileWalletOperator", Id=3, Code="MTN", Name="MTN Mobile Money", Country="NG", IsDeleted=0)
        ng_scenario.insert(
            "MobileMoneyTransfer", Id=55, ReceiptNo="MM-0002", SenderId=10,
            SendingAmount=20, Fee=2, TotalAmount=22, WalletOperatorId=3, PaidToMobileNo="+2348000000000",
        )

        await run_migration()

        transfers = await fetch_all(target_engine, MobileMoneyTransfer)
        assert len(transfers) == 1
        assert transfers[0]["wallet_operator_id"] == 3

    async def test_login_for_unknown_sender_skipped(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("FaxerLogin", FaxerId=10, IsActive=1)
        ng_scenario.insert("FaxerLogin", FaxerId=404, IsActive=1)
        ng_scenario.insert("FaxerLogin", FaxerId=10, IsActive=0)

        result = await run_migration()

        logins = await fetch_all(target_engine, SenderLogin)
        assert [login["sender_id"] for login in logins] == [10]
        assert result.skipped == 1


# ===================== OPTIONAL REFERENCES =====================


class TestOptionalReferences:

    async def test_unknown_optional_keys_become_null(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=103, ReceiptNo="BD-0003", SenderId=10,
            SendingCountry="XX", SendingAmount=5, Fee=1, TotalAmount=6,
            PayingStaffId=42, ComplianceApprovedBy=43, UpdateByStaffId=44, BankId=999,
        )

        result = await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0003")
        assert tx["paying_staff_id"] is None
        assert tx["compliance_approved_by"] is None
        assert tx["updated_by_staff_id"] is None
        assert tx["sending_country_code"] is None

        deposit = await fetch_one(target_engine, BankAccountDeposit, BankAccountDeposit.transaction_id == tx["id"])
        assert deposit["bank_id"] is None
        assert result.warnings >= 5

    async def test_known_staff_is_kept(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("StaffInformation", Id=42, FirstName="Sam", LastName="Ade", EmailAddress="sam@moneyfex.com")
        ng_scenario.execute("UPDATE BankAccountDeposit SET PayingStaffId = 42 WHERE TransactionId = 101")

        await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0001")
        assert tx["paying_staff_id"] == 42

    async def test_sender_with_unknown_country(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("FaxerInformation", Id=11, FirstName="Kofi", LastName="Mensah", Email="k@example.com", Country="ZZ", IsDeleted=0)

        await run_migration()

        sender = await fetch_one(target_engine, Sender, Sender.id == 11)
        assert sender["country_code"] is None


# ===================== DUPLICATES & FILTERS =====================


class TestDuplicatesAndFilters:

    async def test_duplicate_account_number_skipped(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("FaxerInformation", Id=11, FirstName="Copy", LastName="Cat", Email="c@example.com", AccountNo="MF-10", IsDeleted=0)

        result = await run_migration()

        assert result.success
        assert await count(target_engine, Sender) == 1
        assert result.skipped == 1

    async def test_blank_account_numbers_do_not_collide(self, legacy_db, run_migration, target_engine):
        legacy_db.insert("FaxerInformation", Id=1, FirstName="A", LastName="B", Email="a@example.com", AccountNo="", IsDeleted=0)
        legacy_db.insert("FaxerInformation", Id=2, FirstName="C", LastName="D", Email="c@example.com", AccountNo="  ", IsDeleted=0)

        await run_migration()

        assert await count(target_engine, Sender) == 2

    async def test_soft_deleted_rows_not_migrated(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("Country", CountryCode="ZW", CountryName="Zimbabwe", IsDeleted=1)
        ng_scenario.insert("FaxerInformation", Id=12, FirstName="Gone", LastName="User", Email="g@example.com", IsDeleted=1)

        await run_migration()

        assert await count(target_engine, Country) == 1
        assert await count(target_engine, Sender) == 1

    async def test_oversized_legacy_id_skipped(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("Bank", Id=2 ** 40, Name="Too Big", IsDeleted=0)

        result = await run_migration()

        assert result.success
        assert await count(target_engine, Bank) == 1
        assert result.skipped == 1


# ===================== DERIVED FIELDS =====================


class TestDerivedFields:

    async def test_total_computed_when_missing(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=104, ReceiptNo="BD-0004", SenderId=10,
            SendingAmount=50, Fee=2.5,
        )

        await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0004")
        assert tx["total_amount"] == Decimal("52.5")

    async def test_unreadable_date_replaced_with_warning(self, ng_scenario, run_migration, target_engine, caplog):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=106, ReceiptNo="BD-0006", SenderId=10,
            TransactionDate="not a date", SendingAmount=5, Fee=1, TotalAmount=6,
        )
        caplog.set_level(logging.WARNING, logger="moneyfex_migrator")

        result = await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0006")
        assert tx["transaction_date"] is not None
        assert result.warnings == 1
        assert any(
            "BD-0006" in r.getMessage() and "TransactionDate" in r.getMessage() for r in caplog.records
        )

    async def test_missing_date_is_silent(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=107, ReceiptNo="BD-0007", SenderId=10,
            SendingAmount=5, Fee=1, TotalAmount=6,
        )

        result = await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0007")
        assert tx["transaction_date"] is not None
        assert result.warnings == 0

    async def test_source_total_carried_as_is(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "BankAccountDeposit", TransactionId=105, ReceiptNo="BD-0005", SenderId=10,
            SendingAmount=50, Fee=2, TotalAmount=55,
        )

        await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0005")
        assert tx["total_amount"] == Decimal("55")

    async def test_receiver_full_name(self, legacy_db, run_migration, target_engine):
        legacy_db.insert("ReceiversDetails", Id=1, FirstName="  Chinedu ", MiddleName=None, LastName="Obi")

        await run_migration()

        detail = await fetch_one(target_engine, ReceiverDetail, ReceiverDetail.id == 1)
        assert detail["full_name"] == "Chinedu Obi"

    async def test_cash_pickup_uses_faxing_columns(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("Recipients", Id=5, ReceiverName="Ngozi Obi", IsDeleted=0)
        ng_scenario.insert(
            "FaxingNonCardTransaction", Id=9, ReceiptNumber="CP-0003", SenderId=10,
            FaxingAmount=30, FaxingFee=3, FaxingStatus=2, Reason=5, MFCN="MF123456",
            RecipientId=5, NonCardRecieverId=77, AgentStaffName="Agent Kay",
        )

        await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "CP-0003")
        assert tx["status"] == TransactionStatus.RECEIVED
        assert tx["total_amount"] == Decimal("33")
        assert tx["reason_for_transfer"] == 5
        assert tx["paying_staff_name"] == "Agent Kay"

        pickup = await fetch_one(target_engine, CashPickup, CashPickup.transaction_id == tx["id"])
        assert pickup["mfcn"] == "MF123456"
        assert pickup["recipient_id"] == 5
        assert pickup["non_card_receiver_id"] is None

    async def test_kiibank_owner_name_from_recipient(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("Recipients", Id=6, ReceiverName="Emeka Obi", IsDeleted=0)
        ng_scenario.insert(
            "KiiBankTransfer", Id=1, ReceiptNo="KB-0001", SenderId=10, SendingAmount=10, Fee=0,
            AccountNo="KII-1", ReceiverName="E. Obi", RecipientId=6,
        )
        ng_scenario.insert(
            "KiiBankTransfer", Id=2, ReceiptNo="KB-0002", SenderId=10, SendingAmount=10, Fee=0,
            AccountNo="KII-2", ReceiverName="Bola Ade", RecipientId=None,
        )

        await run_migration()

        transfers = {t["account_no"]: t for t in await fetch_all(target_engine, KiiBankTransfer)}
        assert transfers["KII-1"]["account_owner_name"] == "Emeka Obi"
        assert transfers["KII-2"]["account_owner_name"] == "Bola Ade"
        assert transfers["KII-1"]["bank_id"] is None


# ===================== CARD PAYMENTS & REINITIALISATION =====================


class TestCardPayments:

    async def test_card_payment_resolves_through_receipt(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "CardTopUpCreditDebitInformation", Id=1, CardTransactionId=101,
            NameOnCard="ADA OBI", CardNumber="**** 4242", ExpiryDate="12/27", TransferType=1,
        )

        await run_migration()

        tx = await fetch_one(target_engine, Transaction, Transaction.receipt_no == "BD-0001")
        card = await fetch_one(target_engine, CardPaymentInformation, CardPaymentInformation.legacy_id == 1)
        assert card["transaction_id"] == tx["id"]
        assert card["card_transaction_id"] == 101

    async def test_unresolved_card_payment_kept_without_transaction(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("CardTopUpCreditDebitInformation", Id=2, CardTransactionId=5555, TransferType=1)

        result = await run_migration()

        card = await fetch_one(target_engine, CardPaymentInformation, CardPaymentInformation.legacy_id == 2)
        assert card["transaction_id"] is None
        assert result.record_counts["card_payment_information"] == 1

    async def test_card_payments_not_duplicated_on_rerun(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert("CardTopUpCreditDebitInformation", Id=1, CardTransactionId=101, TransferType=1)

        await run_migration()
        await run_migration()

        assert await count(target_engine, CardPaymentInformation) == 1


class TestReinitialize:

    async def test_reinitialize_rows(self, ng_scenario, run_migration, target_engine):
        ng_scenario.insert(
            "ReinitializeTransaction", Id=1, ReceiptNo="BD-0001", NewReceiptNo="BD-0001-R1",
            Date="2024-02-01 09:00:00", CreatedById=77, CreatedByName="Ops",
        )

        await run_migration()
        await run_migration()

        rows = await fetch_all(target_engine, ReinitializeTransaction)
        assert len(rows) == 1
        assert rows[0]["receipt_no"] == "BD-0001"
        assert rows[0]["created_by_id"] is None
        assert rows[0]["created_by_name"] == "Ops"


# ===================== VALIDATION =====================


class TestValidation:

    async def test_clean_run_passes(self, ng_scenario, run_migration, source_engine, target_engine):
        await run_migration()

        report = await validate_migration(source_engine, target_engine)

        assert report.passed
        counts = {c.target_table: c for c in report.counts}
        assert counts["bank_account_deposits"].matches
        assert counts["senders"].legacy_count == 1

    async def test_orphan_detail_detected(self, ng_scenario, run_migration, source_engine, target_engine):
        await run_migration()
        async with target_engine.begin() as conn:
            await conn.execute(insert(MobileMoneyTransfer.__table__).values(
                transaction_id=999, wallet_operator_id=1, paid_to_mobile_no="",
                created_at=func.current_timestamp(), updated_at=func.current_timestamp(),
            ))

        report = await validate_migration(source_engine, target_engine)

        assert not report.passed
        assert any("orphan" in e and "mobile_money_transfers" in e for e in report.errors)

    async def test_skipped_rows_are_only_warnings(self, ng_scenario, run_migration, source_engine, target_engine):
        ng_scenario.insert("BankAccountDeposit", TransactionId=102, ReceiptNo="BD-0002", SenderId=999)
        await run_migration()

        report = await validate_migration(source_engine, target_engine)

        assert report.passed
        assert any("BankAccountDeposit" in w for w in report.warnings)
