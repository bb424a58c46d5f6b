"""Process-wide application state, loaded once from the persistence store"""
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from finbot.config import Settings
from finbot.database import (
    ALLOWLIST,
    BUDGETS,
    CATEGORIES,
    COLLECTIONS,
    ENTRIES,
    OWNER_BINDING,
    CollectionStore,
    create_store,
)
from finbot.logger import create_logger
from finbot.services.access_control import AccessGate
from finbot.services.budget_monitor import BudgetMonitor, BudgetTable
from finbot.services.classifier import CategoryTable
from finbot.services.insights import InsightGenerator
from finbot.services.ledger import Ledger
from finbot.services.receipt_storage import ReceiptStorage

logger = create_logger("state")


@dataclass
class AppState:
    """
    Every mutable collection the command handlers work on.

    Messages are handled one at a time, so handlers mutate these objects
    without locking.
    """
    settings: Settings
    store: CollectionStore
    categories: CategoryTable
    ledger: Ledger
    budgets: BudgetTable
    gate: AccessGate
    receipts: ReceiptStorage
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def load(
        cls,
        settings: Settings,
        store: Optional[CollectionStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "AppState":
        """
        Build state from the store.

        Collections that do not exist yet are written with defaults. Unreadable
        ones start from defaults in memory but stay untouched in the store.
        """
        store = store if store is not None else create_store(settings)
        records = {name: store.load(name) for name in COLLECTIONS}

        state = cls(
            settings=settings,
            store=store,
            categories=CategoryTable.from_record(store, records[CATEGORIES]),
            ledger=Ledger.from_records(store, records[ENTRIES], tz=settings.tzinfo, clock=clock),
            budgets=BudgetTable.from_record(store, records[BUDGETS]),
            gate=AccessGate.from_records(store, records[ALLOWLIST], records[OWNER_BINDING]),
            receipts=ReceiptStorage(settings.receipts_dir),
        )

        for name, value in records.items():
            if value is None and name != OWNER_BINDING and name not in store.unreadable:
                store.save(name, state.snapshot(name))
                logger.info("Collection initialized with defaults", {"collection": name})

        logger.info("State loaded", {
            "entries": len(state.ledger),
            "categories": len(state.categories.names()),
            "budgets": len(state.budgets),
            "allowlist": len(state.gate.contacts()),
            "owner_chat_bound": state.gate.owner_chat_id is not None,
        })
        return state

    @property
    def monitor(self) -> BudgetMonitor:
        return BudgetMonitor(self.ledger, self.budgets, self.settings.budget_warning_percent)

    @property
    def insights(self) -> InsightGenerator:
        return InsightGenerator(self.ledger, self.settings.insight_min_entries)

    def now(self) -> datetime:
        return self.ledger.now()

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def snapshot(self, name: str) -> Any:
        if name == ENTRIES:
            return self.ledger.to_records()
        if name == CATEGORIES:
            return self.categories.to_record()
        if name == BUDGETS:
            return self.budgets.to_record()
        if name == ALLOWLIST:
            return self.gate.contacts()
        if name == OWNER_BINDING:
            return self.gate.binding_record()
        raise KeyError(name)

    def flush(self) -> None:
        """Write every collection in full, except ones that could not be read and were not changed since"""
        for name in COLLECTIONS:
            if name in self.store.unreadable:
                continue
            if name == OWNER_BINDING and self.gate.owner_chat_id is None:
                continue
            self.store.save(name, self.snapshot(name))

    def close(self) -> None:
        self.flush()
        self.store.close()
        logger.info("State flushed", {"entries": len(self.ledger)})
