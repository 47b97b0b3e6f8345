import csv
import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import MONEY_CONTEXT, Snapshot, Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFFFFFF
PRECISION = Decimal("0.0001")
# Per-record ceiling; with u32 tx ids no balance can outgrow MONEY_CONTEXT.
MAX_AMOUNT = Decimal("1000000000000000")
OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None for malformed rows."""
    try:
        # DictReader maps missing trailing columns to None and extra ones under a None key.
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])

        if not 0 <= client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client id {client_id} out of range")
        if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(f"tx id {transaction_id} out of range")

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str and transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            amount = Decimal(amount_str)
            if not amount.is_finite():
                raise ValueError(f"amount {amount_str} is not finite")
            if abs(amount) > MAX_AMOUNT:
                raise ValueError(f"amount {amount_str} exceeds {MAX_AMOUNT}")
            amount = amount.quantize(PRECISION, rounding=ROUND_DOWN)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e}")
        return None


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """Yield transactions from a CSV file in file order, skipping malformed rows."""
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f, skipinitialspace=True)
        for row in reader:
            transaction = parse_csv_row(row)
            if transaction:
                yield transaction


def format_amount(value: Decimal) -> str:
    """Fixed four decimal places."""
    return f"{value.quantize(PRECISION, context=MONEY_CONTEXT):f}"


def write_accounts(snapshots: Iterable[Snapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in snapshots:
        for account in snapshot.sorted_accounts():
            writer.writerow([
                account.client_id,
                format_amount(account.available),
                format_amount(account.held),
                format_amount(account.total),
                str(account.locked).lower(),
            ])
