"""
Sender and receiver models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from moneyfex_migrator.database import Base


class Sender(Base):
    """Customer sending money (legacy FaxerInformation)"""
    __tablename__ = "senders"

    id = Column(Integer, primary_key=True, autoincrement=False)
    first_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone_number = Column(String, nullable=True)
    account_no = Column(String, unique=True, nullable=True)

    # Address
    address1 = Column(String, nullable=True)
    address2 = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)
    postal_code = Column(String, nullable=True)

    is_business = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    country = relationship("Country")
    login = relationship("SenderLogin", back_populates="sender", uselist=False)


class SenderLogin(Base):
    __tablename__ = "sender_logins"

    sender_id = Column(Integer, ForeignKey("senders.id"), primary_key=True, autoincrement=False)
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    sender = relationship("Sender", back_populates="login")


class Recipient(Base):
    __tablename__ = "recipients"

    id = Column(Integer, primary_key=True, autoincrement=False)
    receiver_name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False)


class ReceiverDetail(Base):
    """Non-card (cash pickup) receiver profile"""
    __tablename__ = "receiver_details"

    id = Column(Integer, primary_key=True, autoincrement=False)
    full_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    country = relationship("Country")
