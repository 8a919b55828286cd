"""SQLAlchemy ORM models for accounts and the transaction journal"""

from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Date, Integer, BigInteger, ForeignKey, Text, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Exact monetary precision; never Float
Money = Numeric(15, 2, asdecimal=True)


class AccountRecord(Base):
    """Card-linked account row, guarded by an optimistic version stamp"""

    __tablename__ = "accounts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    card_number = Column(String(16), nullable=False, unique=True)
    customer_name = Column(Text, nullable=False)
    pin = Column(Text, nullable=False)
    balance = Column(Money, nullable=False)
    available_balance = Column(Money, nullable=False)
    daily_withdrawal_limit = Column(Money, nullable=False)
    daily_withdrawn_amount = Column(Money, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False, default=0)


class TransactionRecord(Base):
    """Journal entry; updated at most once, from PENDING to a terminal status"""

    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_account_timestamp", "account_id", "timestamp"),)

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    account_id = Column(ForeignKey("accounts.id"), nullable=False)
    type = Column(String(32), nullable=False)
    amount = Column(Money, nullable=False)
    balance_after = Column(Money, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="PENDING")

