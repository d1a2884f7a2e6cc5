from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from restopos.schemas.entities import DiningTable, TransactionRecord

CSV_HEADER = [
    "Date",
    "Kind",
    "Table",
    "Customer",
    "Items",
    "Total",
    "Status",
    "Payment method",
    "Operator",
]


def _items_count(record: TransactionRecord) -> int:
    return sum(line.quantity for line in record.items)


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def summarize(transactions: Iterable[TransactionRecord]) -> dict:
    records = list(transactions)
    paid = [record for record in records if record.status == "paid"]
    pending = [record for record in records if record.status == "pending"]
    by_method: dict[str, float] = {}
    for record in paid:
        method = record.payment_method or "unknown"
        by_method[method] = round(by_method.get(method, 0) + record.total_amount, 2)
    return {
        "transactions": len(records),
        "paid_count": len(paid),
        "pending_count": len(pending),
        "paid_total": round(sum(record.total_amount for record in paid), 2),
        "pending_total": round(sum(record.total_amount for record in pending), 2),
        "items_sold": sum(_items_count(record) for record in paid),
        "paid_by_method": by_method,
    }


def dashboard_stats(
    tables: Iterable[DiningTable],
    transactions: Iterable[TransactionRecord],
    today: Optional[date] = None,
) -> dict:
    today = today or datetime.now(timezone.utc).date()
    table_list = list(tables)
    todays = [record for record in transactions if record.timestamp.date() == today]
    return {
        "total_tables": len(table_list),
        "empty_tables": sum(1 for table in table_list if table.status == "empty"),
        "occupied_tables": sum(1 for table in table_list if table.status == "occupied"),
        "reserved_tables": sum(1 for table in table_list if table.status == "reserved"),
        "today_transactions": len(todays),
        "today_revenue": round(sum(record.total_amount for record in todays if record.status == "paid"), 2),
    }


def transactions_csv(transactions: Iterable[TransactionRecord]) -> str:
    """Render transactions as CSV with a UTF-8 BOM so spreadsheets pick the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in transactions:
        writer.writerow(
            [
                record.timestamp.isoformat(),
                record.kind,
                str(record.table_number) if record.table_number else "-",
                record.customer_name,
                str(_items_count(record)),
                _format_amount(record.total_amount),
                record.status,
                record.payment_method or "-",
                record.operator_role or "-",
            ]
        )
    return "\ufeff" + buffer.getvalue()
