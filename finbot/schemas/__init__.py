"""
Schemas module for the finance bot

Provides Pydantic models for data validation and serialization.
"""

from finbot.schemas.ledger import (
    FALLBACK_CATEGORY,
    INCOME_CATEGORY,
    SELF_AUTHOR,
    AlertMessage,
    BudgetStatus,
    Entry,
    EntryKind,
)

__all__ = [
    'FALLBACK_CATEGORY',
    'INCOME_CATEGORY',
    'SELF_AUTHOR',
    'AlertMessage',
    'BudgetStatus',
    'Entry',
    'EntryKind',
]
