"""
Transaction identity reconciliation tests
"""
from datetime import datetime
from decimal import Decimal

import pytest_asyncio
from sqlalchemy import insert

from moneyfex_migrator.engine.reconciler import TransactionReconciler
from moneyfex_migrator.models import Sender, Transaction


async def add_transaction(engine, tx_id, receipt_no):
    now = datetime.utcnow()
    async with engine.begin() as conn:
        await conn.execute(insert(Transaction.__table__).values(
            id=tx_id, receipt_no=receipt_no, transaction_date=now, sender_id=1,
            sending_amount=Decimal("10"), receiving_amount=Decimal("10"), fee=Decimal("0"),
            total_amount=Decimal("10"), exchange_rate=Decimal("1"),
            sender_payment_mode=0, transaction_module=0, status=0,
            created_at=now, updated_at=now,
        ))


@pytest_asyncio.fixture()
async def three_transfers(legacy_db, target_engine):
    """BD-0001 / MM-0002 / CP-0003 minted as legacy 101 / 55 / 9, migrated to 1 / 2 / 3"""
    legacy_db.insert("BankAccountDeposit", TransactionId=101, ReceiptNo="BD-0001", SenderId=1)
    legacy_db.insert("MobileMoneyTransfer", Id=55, ReceiptNo="MM-0002", SenderId=1)
    legacy_db.insert("FaxingNonCardTransaction", Id=9, ReceiptNumber="CP-0003", SenderId=1)

    now = datetime.utcnow()
    async with target_engine.begin() as conn:
        await conn.execute(insert(Sender.__table__).values(
            id=1, first_name="Ada", last_name="Obi", email="ada@example.com",
            created_at=now, updated_at=now,
        ))
    await add_transaction(target_engine, 1, "BD-0001")
    await add_transaction(target_engine, 2, "MM-0002")
    await add_transaction(target_engine, 3, "CP-0003")
    return legacy_db


async def test_build_joins_on_receipt(source_engine, target_engine, three_transfers):
    reconciler = TransactionReconciler(source_engine, target_engine)
    mapping = await reconciler.build()

    assert mapping == {101: 1, 55: 2, 9: 3}
    assert reconciler.collisions == 0


async def test_resolve_card_transaction_id(source_engine, target_engine, three_transfers):
    reconciler = TransactionReconciler(source_engine, target_engine)
    await reconciler.build()

    assert reconciler.resolve(101, None, None) == 1
    assert reconciler.resolve(None, 55, None) == 2
    assert reconciler.resolve(None, None, 9) == 3


async def test_resolve_order_and_miss(source_engine, target_engine, three_transfers):
    reconciler = TransactionReconciler(source_engine, target_engine)
    await reconciler.build()

    # card id is tried first, then non-card, then top-up
    assert reconciler.resolve(55, 101, None) == 2
    assert reconciler.resolve(4040, None, 9) == 3
    assert reconciler.resolve(4040, 5050, 6060) is None
    assert reconciler.resolve(None, None, None) is None


async def test_receipt_not_in_target_is_ignored(source_engine, target_engine, three_transfers):
    three_transfers.insert("BankAccountDeposit", TransactionId=102, ReceiptNo="BD-0999", SenderId=1)

    reconciler = TransactionReconciler(source_engine, target_engine)
    mapping = await reconciler.build()

    assert 102 not in mapping


async def test_colliding_legacy_ids_later_table_wins(source_engine, target_engine, legacy_db):
    legacy_db.insert("BankAccountDeposit", TransactionId=7, ReceiptNo="BD-0001", SenderId=1)
    legacy_db.insert("MobileMoneyTransfer", Id=7, ReceiptNo="MM-0002", SenderId=1)
    await add_transaction(target_engine, 1, "BD-0001")
    await add_transaction(target_engine, 2, "MM-0002")

    reconciler = TransactionReconciler(source_engine, target_engine)
    mapping = await reconciler.build()

    assert mapping[7] == 2
    assert reconciler.collisions == 1
