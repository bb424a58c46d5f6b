"""
Budget Monitor - monthly limits per category

Budgets are monthly targets keyed by category name. A budget may name a
category that has no entries yet. Month-to-date spend is compared against each
limit after every recorded expense:
- below the warning percentage (default 90%): nothing
- warning percentage up to 100%: "warning"
- 100% and above: "exceeded"
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from finbot.database import BUDGETS, CollectionStore
from finbot.logger import create_logger
from finbot.schemas.ledger import AlertLevel, AlertMessage, BudgetStatus
from finbot.services.ledger import Ledger, Period, totals_by_category

logger = create_logger("budget_monitor")

HUNDRED = Decimal("100")


def _decimal_to_float(value: Decimal | float | int) -> float:
    """Convert Decimal to float for JSON serialization."""
    return float(value)


class BudgetTable:
    """Ordered category -> monthly limit mapping, persisted as `budgets`"""

    def __init__(self, store: CollectionStore, limits: Optional[Dict[str, Decimal]] = None):
        self.store = store
        self.limits: Dict[str, Decimal] = dict(limits or {})

    @classmethod
    def from_record(cls, store: CollectionStore, record: Any) -> "BudgetTable":
        limits = {}
        if isinstance(record, dict):
            for category, amount in record.items():
                try:
                    limit = Decimal(str(amount))
                except InvalidOperation:
                    logger.warn("Skipping unreadable budget", {"category": category, "amount": amount})
                    continue
                if limit > 0:
                    limits[str(category)] = limit
        return cls(store, limits)

    def to_record(self) -> Dict[str, float]:
        return {category: _decimal_to_float(limit) for category, limit in self.limits.items()}

    def set(self, category: str, limit: Decimal) -> None:
        if limit <= 0:
            raise ValueError(f"budget limit must be positive, got {limit}")
        self.limits[category] = limit
        self.store.save(BUDGETS, self.to_record())
        logger.info("Budget saved", {"category": category, "limit": _decimal_to_float(limit)})

    def __len__(self) -> int:
        return len(self.limits)


class BudgetMonitor:
    """Evaluates month-to-date spend against the budget table"""

    def __init__(self, ledger: Ledger, budgets: BudgetTable, warning_percent: int = 90):
        self.ledger = ledger
        self.budgets = budgets
        self.warning_percent = Decimal(warning_percent)

    def level_for(self, percentage: Decimal) -> Optional[AlertLevel]:
        if percentage >= HUNDRED:
            return "exceeded"
        if percentage >= self.warning_percent:
            return "warning"
        return None

    def overview(self) -> List[BudgetStatus]:
        """Every budget in table order with its month-to-date spend"""
        # Month totals include every entry kind, as recorded
        month_totals = totals_by_category(self.ledger.by_period(Period.MONTH))
        statuses = []
        for category, limit in self.budgets.limits.items():
            spent = month_totals.get(category, Decimal("0"))
            percentage = spent / limit * HUNDRED
            statuses.append(BudgetStatus(
                category=category,
                spent=spent,
                limit=limit,
                percentage=float(percentage),
                level=self.level_for(percentage),
            ))
        return statuses

    def check_alerts(self) -> List[AlertMessage]:
        """Alerts in budget table order; categories without spend are skipped"""
        alerts = []
        for status in self.overview():
            if not status.spent or status.level is None:
                continue
            alerts.append(AlertMessage(
                level=status.level,
                category=status.category,
                spent=status.spent,
                limit=status.limit,
                percentage=status.percentage,
            ))
        return alerts
