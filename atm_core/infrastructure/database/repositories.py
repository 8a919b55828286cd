"""Data access layer for accounts and the transaction journal"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from atm_core.infrastructure.database.models import AccountRecord, TransactionRecord
from atm_core.domain.exceptions import VersionConflictError
from atm_core.domain.models import CENT, Account, Transaction, TransactionStatus, TransactionType


def _account_from_record(row: AccountRecord) -> Account:
    return Account(
        id=row.id,
        card_number=row.card_number,
        customer_name=row.customer_name,
        pin=row.pin,
        balance=row.balance,
        available_balance=row.available_balance,
        daily_withdrawal_limit=row.daily_withdrawal_limit,
        daily_withdrawn_amount=row.daily_withdrawn_amount,
        last_activity_date=row.last_activity_date,
        active=row.active,
        version=row.version,
    )


def _transaction_from_record(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        account_id=row.account_id,
        type=TransactionType(row.type),
        amount=row.amount,
        balance_after=row.balance_after,
        timestamp=row.timestamp,
        description=row.description or "",
        status=TransactionStatus(row.status),
    )


class AccountRepository:
    """Repository for accounts with version-conditional writes"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: int) -> Optional[Account]:
        """Read the current committed state; every call goes to the database"""
        row = self.db.execute(
            select(AccountRecord).where(AccountRecord.id == account_id).execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _account_from_record(row) if row is not None else None

    def find_by_card_number(self, card_number: str) -> Optional[Account]:
        row = self.db.execute(
            select(AccountRecord).where(AccountRecord.card_number == card_number).execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _account_from_record(row) if row is not None else None

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(AccountRecord)).scalar_one()

    def create(self, account: Account) -> Account:
        """Insert a new account at version 0"""
        record = AccountRecord(
            card_number=account.card_number,
            customer_name=account.customer_name,
            pin=account.pin,
            balance=account.balance,
            available_balance=account.available_balance,
            daily_withdrawal_limit=account.daily_withdrawal_limit,
            daily_withdrawn_amount=account.daily_withdrawn_amount,
            last_activity_date=account.last_activity_date,
            active=account.active,
            version=0,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return _account_from_record(record)

    def save(self, account: Account) -> Account:
        """
        Write mutable account state if and only if the stored version still
        equals account.version.

        Raises:
            VersionConflictError: another writer updated the row since it was read

        Returns:
            The account stamped with its new version
        """
        result = self.db.execute(
            update(AccountRecord)
            .where(AccountRecord.id == account.id, AccountRecord.version == account.version)
            .values(
                balance=account.balance,
                available_balance=account.available_balance,
                daily_withdrawn_amount=account.daily_withdrawn_amount,
                last_activity_date=account.last_activity_date,
                version=account.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise VersionConflictError("Account", account.id, account.version)
        return replace(account, version=account.version + 1)


class TransactionRepository:
    """Repository for the append-mostly transaction journal"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, txn: Transaction) -> Transaction:
        """Append a journal entry and return it with its assigned id"""
        record = TransactionRecord(
            account_id=txn.account_id,
            type=txn.type.value,
            amount=txn.amount,
            balance_after=txn.balance_after,
            timestamp=txn.timestamp,
            description=txn.description,
            status=txn.status.value,
        )
        self.db.add(record)
        self.db.flush()
        return replace(txn, id=record.id)

    def get(self, txn_id: int) -> Optional[Transaction]:
        row = self.db.execute(
            select(TransactionRecord)
            .where(TransactionRecord.id == txn_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _transaction_from_record(row) if row is not None else None

    def settle(self, txn: Transaction) -> Transaction:
        """
        Move a PENDING entry to its terminal state.

        Conditional on the stored status still being PENDING, so two racing
        completions can never both settle the same entry.

        Raises:
            VersionConflictError: the entry left PENDING since it was read
        """
        result = self.db.execute(
            update(TransactionRecord)
            .where(
                TransactionRecord.id == txn.id,
                TransactionRecord.status == TransactionStatus.PENDING.value,
            )
            .values(
                status=txn.status.value,
                balance_after=txn.balance_after,
                description=txn.description,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise VersionConflictError("Transaction", txn.id)
        return txn

    def pending_withdrawal_total(self, account_id: int) -> Decimal:
        """Sum of withdrawals still awaiting settlement, i.e. funds on hold"""
        total = self.db.execute(
            select(func.coalesce(func.sum(TransactionRecord.amount), 0)).where(
                TransactionRecord.account_id == account_id,
                TransactionRecord.type == TransactionType.WITHDRAWAL.value,
                TransactionRecord.status == TransactionStatus.PENDING.value,
            )
        ).scalar_one()
        return Decimal(total).quantize(CENT)

    def list_by_account(self, account_id: int, limit: Optional[int] = None) -> List[Transaction]:
        """Journal entries for an account, newest first"""
        query = (
            select(TransactionRecord)
            .where(TransactionRecord.account_id == account_id)
            .order_by(TransactionRecord.timestamp.desc(), TransactionRecord.id.desc())
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            query = query.limit(limit)
        return [_transaction_from_record(row) for row in self.db.execute(query).scalars()]
