"""Sample accounts for local development and demos"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from atm_core.config import settings
from atm_core.domain.models import Account, ZERO
from atm_core.infrastructure.database.repositories import AccountRepository
from atm_core.infrastructure.observability.logging import setup_logging
from atm_core.utils.masking import mask_card_number

logger = logging.getLogger(__name__)

# card number, customer name, PIN, opening balance, daily withdrawal limit
SAMPLE_ACCOUNTS = [
    ("4532015112830366", "John Doe", "1234", "5000.00", "1000.00"),
    ("5425233430109903", "Jane Smith", "5678", "10000.00", "2000.00"),
    ("4916338506082832", "Bob Johnson", "9012", "2500.00", "500.00"),
    ("4024007134564842", "Alice Williams", "3456", "15000.00", "3000.00"),
    ("5200828282828210", "Charlie Brown", "7890", "7500.00", "1500.00"),
]


def seed_sample_accounts(db: Session, today: date | None = None) -> int:
    """
    Insert the sample accounts when the accounts table is empty.

    Returns:
        Number of accounts created (0 when data already exists)
    """
    repo = AccountRepository(db)
    if repo.count() > 0:
        logger.info("Database already contains data. Skipping initialization.")
        return 0

    today = today or date.today()
    for card_number, name, pin, balance, limit in SAMPLE_ACCOUNTS:
        repo.create(
            Account(
                id=0,
                card_number=card_number,
                customer_name=name,
                pin=pin,
                balance=Decimal(balance),
                available_balance=Decimal(balance),
                daily_withdrawal_limit=Decimal(limit),
                daily_withdrawn_amount=ZERO,
                last_activity_date=today,
                active=True,
                version=0,
            )
        )
        logger.info("Seeded account", extra={"card": mask_card_number(card_number), "balance": balance})

    db.commit()
    logger.info("Sample data initialized successfully", extra={"accounts_created": len(SAMPLE_ACCOUNTS)})
    return len(SAMPLE_ACCOUNTS)


def main() -> None:
    """Console entry point: create the schema and seed sample accounts"""
    from atm_core.infrastructure.database.session import SessionLocal, init_db

    setup_logging(settings.log_level)
    init_db()
    db = SessionLocal()
    try:
        seed_sample_accounts(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
