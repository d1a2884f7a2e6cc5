"""SQL schema and data export for migrating the local store to PostgreSQL.

Statements are built with ``:name`` placeholders and a parameter dict. They
can be executed as bound statements through SQLAlchemy, or rendered into a
plain-text dump where every value goes through ``render_literal``.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from restopos.core.errors import ValidationError
from restopos.repositories.menu import MenuRepository
from restopos.repositories.tables import TableRepository
from restopos.repositories.transactions import TransactionRepository

logger = logging.getLogger(__name__)

# Local ids that are not UUIDs are mapped into this namespace
ID_NAMESPACE = uuid.UUID("5b0f3f1e-8a55-4c2e-9f1c-6d1b2b7c4a10")

_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")

SCHEMA_SQL = """-- Restaurant management schema (PostgreSQL 13+)

CREATE TABLE IF NOT EXISTS users (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name VARCHAR(100) NOT NULL,
  username VARCHAR(50) UNIQUE NOT NULL,
  password_hash TEXT NOT NULL,
  role VARCHAR(20) NOT NULL DEFAULT 'staff' CHECK (role IN ('owner', 'staff')),
  created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS dining_tables (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  number INTEGER UNIQUE NOT NULL CHECK (number > 0),
  capacity INTEGER NOT NULL DEFAULT 4 CHECK (capacity > 0),
  status VARCHAR(20) NOT NULL DEFAULT 'empty' CHECK (status IN ('empty', 'occupied', 'reserved')),
  customer_name VARCHAR(100),
  occupied_since TIMESTAMP WITH TIME ZONE,
  reservation_date DATE,
  reservation_time TIME,
  reservation_people INTEGER CHECK (reservation_people > 0),
  created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS menu_items (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name VARCHAR(100) NOT NULL,
  price DECIMAL(12,2) NOT NULL CHECK (price >= 0),
  category VARCHAR(20) NOT NULL DEFAULT 'food' CHECK (category IN ('food', 'drink', 'package')),
  active BOOLEAN NOT NULL DEFAULT true,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS transactions (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  kind VARCHAR(20) NOT NULL CHECK (kind IN ('dine_in', 'takeaway')),
  table_number INTEGER,
  customer_name VARCHAR(100) NOT NULL,
  total_amount DECIMAL(12,2) NOT NULL CHECK (total_amount >= 0),
  status VARCHAR(20) NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'paid')),
  payment_method VARCHAR(20) CHECK (payment_method IN ('cash', 'qris', 'transfer')),
  operator_role VARCHAR(20) CHECK (operator_role IN ('owner', 'staff')),
  created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS transaction_items (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  transaction_id UUID NOT NULL REFERENCES transactions(id) ON DELETE CASCADE,
  menu_item_id UUID,
  name VARCHAR(100) NOT NULL,
  quantity INTEGER NOT NULL CHECK (quantity > 0),
  unit_price DECIMAL(12,2) NOT NULL CHECK (unit_price >= 0),
  total_price DECIMAL(12,2) NOT NULL CHECK (total_price >= 0)
);

CREATE INDEX IF NOT EXISTS idx_dining_tables_status ON dining_tables(status);
CREATE INDEX IF NOT EXISTS idx_menu_items_category ON menu_items(category);
CREATE INDEX IF NOT EXISTS idx_transactions_status ON transactions(status);
CREATE INDEX IF NOT EXISTS idx_transactions_table_number ON transactions(table_number);
CREATE INDEX IF NOT EXISTS idx_transaction_items_transaction_id ON transaction_items(transaction_id);
"""

_TABLE_COLUMNS = (
    "id",
    "number",
    "capacity",
    "status",
    "customer_name",
    "occupied_since",
    "reservation_date",
    "reservation_time",
    "reservation_people",
)
_MENU_COLUMNS = ("id", "name", "price", "category", "active")
_TRANSACTION_COLUMNS = (
    "id",
    "kind",
    "table_number",
    "customer_name",
    "total_amount",
    "status",
    "payment_method",
    "operator_role",
    "created_at",
)
_TRANSACTION_ITEM_COLUMNS = (
    "transaction_id",
    "menu_item_id",
    "name",
    "quantity",
    "unit_price",
    "total_price",
)


def as_uuid(local_id: str) -> str:
    """Return ``local_id`` if it is a UUID, otherwise a stable UUIDv5 for it."""
    try:
        return str(uuid.UUID(str(local_id)))
    except ValueError:
        return str(uuid.uuid5(ID_NAMESPACE, str(local_id)))


def render_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Cannot export non-finite number {value!r}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        value = value.isoformat()
    return "'" + str(value).replace("'", "''") + "'"


def _shell_quote(value: str) -> str:
    return "'" + value.replace("'", "'\"'\"'") + "'"


def _heredoc_delimiter(body: str) -> str:
    """First of SQL, SQL_1, SQL_2, ... that is not a whole line of ``body``."""
    lines = set(body.splitlines())
    delimiter = "SQL"
    suffix = 0
    while delimiter in lines:
        suffix += 1
        delimiter = f"SQL_{suffix}"
    return delimiter


def _insert_sql(table: str, columns: tuple[str, ...], suffix: str = "") -> str:
    placeholders = ", ".join(f":{column}" for column in columns)
    sql = f"insert into {table} ({', '.join(columns)}) values ({placeholders})"
    return f"{sql} {suffix};" if suffix else f"{sql};"


_TABLE_UPSERT_SQL = _insert_sql(
    "dining_tables",
    _TABLE_COLUMNS,
    "on conflict (number) do update set "
    + ", ".join(f"{column}=excluded.{column}" for column in _TABLE_COLUMNS if column not in ("id", "number")),
)
_MENU_INSERT_SQL = _insert_sql("menu_items", _MENU_COLUMNS)
_TRANSACTION_INSERT_SQL = _insert_sql("transactions", _TRANSACTION_COLUMNS)
_TRANSACTION_ITEM_INSERT_SQL = _insert_sql("transaction_items", _TRANSACTION_ITEM_COLUMNS)


@dataclass(frozen=True)
class Statement:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        def _substitute(match: re.Match) -> str:
            return render_literal(self.params[match.group(1)])

        return _PLACEHOLDER.sub(_substitute, self.sql)

    def to_clause(self) -> TextClause:
        return text(self.sql).bindparams(**self.params)


class SQLExportService:
    def __init__(
        self,
        tables: TableRepository,
        menu: MenuRepository,
        transactions: TransactionRepository,
    ) -> None:
        self._tables = tables
        self._menu = menu
        self._transactions = transactions

    def generate_create_table_sql(self) -> str:
        return SCHEMA_SQL

    def build_insert_statements(self) -> dict[str, list[Statement]]:
        """Bound statements per target relation, in dependency order."""
        sections: dict[str, list[Statement]] = {
            "dining_tables": [],
            "menu_items": [],
            "transactions": [],
            "transaction_items": [],
        }
        for table in self._tables.load():
            sections["dining_tables"].append(
                Statement(
                    _TABLE_UPSERT_SQL,
                    {
                        "id": as_uuid(table.id),
                        "number": table.number,
                        "capacity": table.capacity,
                        "status": table.status,
                        "customer_name": table.customer_name,
                        "occupied_since": table.occupied_since,
                        "reservation_date": table.reservation_date,
                        "reservation_time": table.reservation_time,
                        "reservation_people": table.reservation_people,
                    },
                )
            )
        for item in self._menu.load():
            sections["menu_items"].append(
                Statement(
                    _MENU_INSERT_SQL,
                    {
                        "id": as_uuid(item.id),
                        "name": item.name,
                        "price": item.price,
                        "category": item.category,
                        "active": item.active,
                    },
                )
            )
        for record in self._transactions.load():
            transaction_id = as_uuid(record.id)
            sections["transactions"].append(
                Statement(
                    _TRANSACTION_INSERT_SQL,
                    {
                        "id": transaction_id,
                        "kind": record.kind,
                        "table_number": record.table_number,
                        "customer_name": record.customer_name,
                        "total_amount": record.total_amount,
                        "status": record.status,
                        "payment_method": record.payment_method,
                        "operator_role": record.operator_role,
                        "created_at": record.timestamp,
                    },
                )
            )
            for line in record.items:
                sections["transaction_items"].append(
                    Statement(
                        _TRANSACTION_ITEM_INSERT_SQL,
                        {
                            "transaction_id": transaction_id,
                            "menu_item_id": as_uuid(line.menu_item.id),
                            "name": line.menu_item.name,
                            "quantity": line.quantity,
                            "unit_price": line.menu_item.price,
                            "total_price": round(line.subtotal, 2),
                        },
                    )
                )
        return sections

    def generate_insert_sql(self) -> str:
        sections = self.build_insert_statements()
        lines = ["-- Data exported from the local store", ""]
        for relation, statements in sections.items():
            if not statements:
                continue
            lines.append(f"-- {relation}")
            lines.extend(statement.render() for statement in statements)
            lines.append("")
        logger.info(
            "Insert SQL generated %s",
            " ".join(f"{relation}={len(statements)}" for relation, statements in sections.items()),
        )
        return "\n".join(lines)

    def export_sql(self, include_schema: bool = True) -> str:
        parts = ["begin;"]
        if include_schema:
            parts.append(self.generate_create_table_sql())
        parts.append(self.generate_insert_sql())
        parts.append("commit;")
        return "\n".join(parts)

    def export_psql_script(self, connection_string: Optional[str] = None) -> str:
        sql = self.export_sql(True)
        if not connection_string:
            return sql
        delimiter = _heredoc_delimiter(sql)
        return f"cat <<'{delimiter}' | psql {_shell_quote(connection_string)}\n{sql}\n{delimiter}"
