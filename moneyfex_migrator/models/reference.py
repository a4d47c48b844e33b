"""
Reference data models: countries, banks, wallet operators, staff
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from moneyfex_migrator.database import Base


class Country(Base):
    __tablename__ = "countries"

    country_code = Column(String(3), primary_key=True)  # ISO code, e.g. "NG"
    country_name = Column(String, nullable=False)
    currency = Column(String, nullable=False, default="")
    currency_symbol = Column(String, nullable=False, default="")
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class Bank(Base):
    __tablename__ = "banks"

    # Legacy id is preserved so detail rows can keep referencing it
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)
    country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    country = relationship("Country")


class MobileWalletOperator(Base):
    __tablename__ = "mobile_wallet_operators"

    id = Column(Integer, primary_key=True, autoincrement=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    country_code = Column(String(3), ForeignKey("countries.country_code"), nullable=True)
    mobile_network_code = Column(String, nullable=True)
    payout_provider_id = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    country = relationship("Country")


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=False)
    first_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
