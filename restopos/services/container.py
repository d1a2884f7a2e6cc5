from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from restopos.repositories.menu import MenuRepository
from restopos.repositories.tables import TableRepository
from restopos.repositories.transactions import TransactionRepository
from restopos.repositories.users import UserRepository
from restopos.services.backup import BackupService
from restopos.services.kv_store import KeyValueStore
from restopos.services.menu import MenuService
from restopos.services.settings_store import SettingsStore
from restopos.services.sql_export import SQLExportService
from restopos.services.tables import TableService
from restopos.services.transactions import TransactionService
from restopos.services.users import UserService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: KeyValueStore
    settings: SettingsStore
    tables: TableService
    menu: MenuService
    transactions: TransactionService
    users: UserService
    backup: BackupService
    sql_export: SQLExportService
    table_repo: TableRepository
    transaction_repo: TransactionRepository


def build_services(engine: Engine) -> Services:
    store = KeyValueStore(engine)
    settings = SettingsStore(store)
    table_repo = TableRepository(store)
    menu_repo = MenuRepository(store)
    transaction_repo = TransactionRepository(store)
    user_repo = UserRepository(store)

    tables = TableService(table_repo)
    return Services(
        store=store,
        settings=settings,
        tables=tables,
        menu=MenuService(menu_repo),
        transactions=TransactionService(transaction_repo, menu_repo, tables),
        users=UserService(user_repo),
        backup=BackupService(store, settings),
        sql_export=SQLExportService(table_repo, menu_repo, transaction_repo),
        table_repo=table_repo,
        transaction_repo=transaction_repo,
    )


def seed_demo_data(services: Services) -> None:
    services.users.ensure_seed_users()
    services.menu.seed_demo_menu()
    logger.info("Demo data ensured")
