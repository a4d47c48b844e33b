"""
Unified transaction model and per-transfer-type detail models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from moneyfex_migrator.database import Base

Money = Numeric(18, 2)
Rate = Numeric(18, 6)


class Transaction(Base):
    """One row per transfer, whatever legacy table it came from"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_no = Column(String, unique=True, nullable=False)  # sole cross-type business key
    transaction_date = Column(DateTime, nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("senders.id"), nullable=False, index=True)

    # Corridor
    sending_country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)
    receiving_country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)
    sending_currency = Column(String, nullable=False, default="")
    receiving_currency = Column(String, nullable=False, default="")

    # Financial
    sending_amount = Column(Money, nullable=False)
    receiving_amount = Column(Money, nullable=False)
    fee = Column(Money, nullable=False)
    total_amount = Column(Money, nullable=False)
    exchange_rate = Column(Rate, nullable=False)
    agent_commission = Column(Money, nullable=True)
    extra_fee = Column(Money, nullable=True)
    margin = Column(Money, nullable=True)
    mf_rate = Column(Rate, nullable=True)

    # Canonical enums (see models.enums)
    sender_payment_mode = Column(Integer, nullable=False)
    transaction_module = Column(Integer, nullable=False)
    status = Column(Integer, nullable=False)
    api_service = Column(Integer, nullable=True)
    reason_for_transfer = Column(Integer, nullable=True)
    card_processor_api = Column(Integer, nullable=True)

    # References
    payment_reference = Column(String, nullable=True)
    transfer_reference = Column(String, nullable=True)
    transfer_zero_sender_id = Column(String, nullable=True)
    is_from_mobile = Column(Boolean, default=False)

    # Compliance
    is_compliance_needed = Column(Boolean, default=False)
    is_compliance_approved = Column(Boolean, default=False)
    compliance_approved_by = Column(Integer, ForeignKey("staff.id"), nullable=True)
    compliance_approved_at = Column(DateTime, nullable=True)

    # Staff
    paying_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    paying_staff_name = Column(String, nullable=True)
    updated_by_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)

    transaction_update_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    sender = relationship("Sender")
    paying_staff = relationship("Staff", foreign_keys=[paying_staff_id])
    updated_by_staff = relationship("Staff", foreign_keys=[updated_by_staff_id])
    compliance_approved_by_staff = relationship("Staff", foreign_keys=[compliance_approved_by])


class BankAccountDeposit(Base):
    __tablename__ = "bank_account_deposits"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True, autoincrement=False)
    bank_id = Column(Integer, ForeignKey("banks.id"), nullable=True)
    bank_name = Column(String, nullable=True)
    bank_code = Column(String, nullable=True)

    # Receiver
    receiver_account_no = Column(String, nullable=True)
    receiver_name = Column(String, nullable=True)
    receiver_city = Column(String, nullable=True)

    # Flags
    is_manual_deposit = Column(Boolean, default=False)
    is_manual_approval_needed = Column(Boolean, default=False)
    is_manually_approved = Column(Boolean, default=False)
    is_europe_transfer = Column(Boolean, default=False)
    is_transaction_duplicated = Column(Boolean, default=False)
    duplicate_transaction_receipt_no = Column(String, nullable=True)
    is_business = Column(Boolean, default=False)
    has_made_payment_to_bank_account = Column(Boolean, default=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    transaction = relationship("Transaction")
    bank = relationship("Bank")


class MobileMoneyTransfer(Base):
    __tablename__ = "mobile_money_transfers"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True, autoincrement=False)
    wallet_operator_id = Column(Integer, ForeignKey("mobile_wallet_operators.id"), nullable=False)
    paid_to_mobile_no = Column(String, nullable=False, default="")
    receiver_name = Column(String, nullable=True)
    receiver_city = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    transaction = relationship("Transaction")
    wallet_operator = relationship("MobileWalletOperator")


class CashPickup(Base):
    __tablename__ = "cash_pickups"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True, autoincrement=False)
    mfcn = Column(String, nullable=True)  # MoneyFex control number quoted at pickup
    recipient_id = Column(Integer, ForeignKey("recipients.id"), nullable=True)
    non_card_receiver_id = Column(Integer, ForeignKey("receiver_details.id"), nullable=True)
    is_approved_by_admin = Column(Boolean, default=False)
    agent_staff_name = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    transaction = relationship("Transaction")
    recipient = relationship("Recipient")
    non_card_receiver = relationship("ReceiverDetail")


class KiiBankTransfer(Base):
    __tablename__ = "kiibank_transfers"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True, autoincrement=False)
    account_no = Column(String, nullable=True)
    receiver_name = Column(String, nullable=True)
    account_owner_name = Column(String, nullable=True)
    account_holder_phone_no = Column(String, nullable=True)
    bank_id = Column(Integer, ForeignKey("banks.id"), nullable=True)
    bank_branch_id = Column(Integer, nullable=True)
    bank_branch_code = Column(String, nullable=True)
    transaction_reference = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    transaction = relationship("Transaction")
    bank = relationship("Bank")


class CardPaymentInformation(Base):
    """Card used to fund a transfer; keeps the three legacy id spaces for traceability"""
    __tablename__ = "card_payment_information"

    id = Column(Integer, primary_key=True, autoincrement=True)
    legacy_id = Column(Integer, unique=True, nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    # Legacy transaction id spaces
    card_transaction_id = Column(Integer, nullable=True)
    non_card_transaction_id = Column(Integer, nullable=True)
    top_up_someone_else_transaction_id = Column(Integer, nullable=True)

    name_on_card = Column(String, nullable=True)
    card_number = Column(String, nullable=True)  # masked
    expiry_date = Column(String, nullable=True)  # MM/YY or MM/YYYY
    is_saved_card = Column(Boolean, default=False)
    auto_recharged = Column(Boolean, default=False)
    transfer_type = Column(Integer, nullable=False)

    created_at = Column(DateTime, nullable=False)

    transaction = relationship("Transaction")


class ReinitializeTransaction(Base):
    """Audit link from a reinitialised receipt to the receipt that replaced it"""
    __tablename__ = "reinitialize_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_no = Column(String, nullable=False)
    new_receipt_no = Column(String, unique=True, nullable=False)
    created_by_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    created_by_name = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)

    created_by = relationship("Staff")
