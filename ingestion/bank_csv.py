import csv
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, TextIO

from models.transaction import TransactionRecord

logger = logging.getLogger(__name__)

DATE_COLUMN = 0
AMOUNT_COLUMN = 1
MERCHANT_COLUMN = 4
MIN_COLUMNS = MERCHANT_COLUMN + 1


def row_to_transaction(row: List[str]) -> TransactionRecord:
    """Convert one CSV row into an unsaved, untagged TransactionRecord.

    Raises:
        ValueError: If the row is too short or a field cannot be parsed.
    """
    if len(row) < MIN_COLUMNS:
        raise ValueError(f"Expected at least {MIN_COLUMNS} columns, got {len(row)}")

    date_str = row[DATE_COLUMN].strip().strip('"')
    amount_str = row[AMOUNT_COLUMN].strip().strip('"')
    merchant = row[MERCHANT_COLUMN].strip().strip('"')

    transaction_date = datetime.strptime(date_str, "%m/%d/%Y").date()
    try:
        amount = Decimal(amount_str.replace(",", ""))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount_str!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {amount_str!r}")

    return TransactionRecord.create_with_checksum(
        raw_data=",".join(row),
        date=transaction_date,
        amount=amount,
        merchant_details=merchant,
    )


def ingest(source: TextIO) -> List[TransactionRecord]:
    """
    Ingest a bank export CSV.

    Expected format (no header row):
    - column 1: date, MM/DD/YYYY
    - column 2: signed amount (negative = expense, positive = income)
    - columns 3-4: ignored
    - column 5: merchant details
    """
    transactions = []
    reader = csv.reader(source)

    line_num = 0
    for row in reader:
        line_num += 1

        if not row or not any(field.strip() for field in row):
            continue

        try:
            transactions.append(row_to_transaction(row))
        except ValueError as e:
            logger.warning(f"Skipping malformed line {line_num}: {row} - {e}")
            continue

    logger.info(f"Successfully ingested {len(transactions)} transactions")
    return transactions
