"""
Component wiring for SplitLedger

Builds the record store selected in settings, wraps each collection in a
typed repository, and hands the same repositories to the registry, the
ledger and the balance engine so they all see one consistent store.

The presentation layer calls create_app_components() once and keeps the
returned objects for the lifetime of the session.
"""

from typing import Optional

import structlog

from splitledger.balances import BalanceEngine
from splitledger.config import get_settings
from splitledger.ledger import ExpenseLedger
from splitledger.models.ledger import Group, SharedExpense
from splitledger.notifications import NotificationSink, Notifier
from splitledger.registry import GroupRegistry
from splitledger.services.storage import (
    Collection,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    Repository,
)
from splitledger.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


def build_record_store(backend: Optional[str] = None) -> RecordStore:
    """
    Create the record store for a backend name.

    Args:
        backend: "memory", "json" or "sheets". Defaults to the configured one.
    """
    settings = get_settings()
    backend = backend or settings.storage.backend

    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "json":
        return JsonFileRecordStore(settings.storage.data_dir)
    if backend == "sheets":
        return GoogleSheetsRecordStore(GoogleSheetsClient(settings.google_sheets))
    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components(
    store: Optional[RecordStore] = None,
    sink: Optional[NotificationSink] = None,
) -> tuple[GroupRegistry, ExpenseLedger, BalanceEngine]:
    """
    Factory function to create all ledger components.

    Args:
        store: Record store to use. Built from settings if None.
        sink: Receives user-facing notifications. Log-only if None.

    Returns:
        (group_registry, expense_ledger, balance_engine)
    """
    ledger_settings = get_settings().ledger

    if store is None:
        store = build_record_store()
    logger.info("record_store_ready", store=type(store).__name__)

    groups = Repository(
        store,
        Collection.GROUPS,
        Group,
        invalid_record_policy=ledger_settings.invalid_record_policy,
    )
    expenses = Repository(
        store,
        Collection.SHARED_EXPENSES,
        SharedExpense,
        invalid_record_policy=ledger_settings.invalid_record_policy,
    )

    notifier = Notifier(sink)

    registry = GroupRegistry(groups, expenses, notifier=notifier)
    ledger = ExpenseLedger(
        expenses,
        groups=groups,
        notifier=notifier,
        validator=ExpenseValidator(ledger_settings.split_tolerance),
    )
    engine = BalanceEngine(registry, ledger)

    return registry, ledger, engine
