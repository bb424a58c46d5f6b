"""
Ledger Data Schema - Pydantic Models

This module defines the records the bot keeps in memory and writes to the
persistence store.

Key principles:
1. Values are Decimal in memory and plain JSON numbers on disk
2. Timestamps are timezone-aware; naive stored values are read as UTC
3. Records written by the first version of the bot (Portuguese keys) still load
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator, model_validator


# Reserved category names
INCOME_CATEGORY = "receita"
FALLBACK_CATEGORY = "outros"

SELF_AUTHOR = "self"


class EntryKind(str, Enum):
    """How an entry was recorded"""
    TEXT = "text"
    INCOME = "income"
    RECEIPT_PENDING = "receipt-pending"
    RECEIPT = "receipt"


LEGACY_KINDS = {
    "texto": EntryKind.TEXT.value,
    "receita": EntryKind.INCOME.value,
    "comprovante": EntryKind.RECEIPT_PENDING.value,
}


# ============================================================================
# ENTRY SCHEMA
# ============================================================================

class Entry(BaseModel):
    """One recorded financial event (expense, income or receipt)"""
    value: Decimal = Field(ge=0, validation_alias=AliasChoices("value", "valor"))
    category: str = Field(validation_alias=AliasChoices("category", "categoria"))
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "data"))
    author: str = Field(default=SELF_AUTHOR, validation_alias=AliasChoices("author", "autor"))
    kind: EntryKind = Field(default=EntryKind.TEXT, validation_alias=AliasChoices("kind", "tipo"))

    # Optional fields
    source: Optional[str] = Field(default=None, validation_alias=AliasChoices("source", "fonte"))
    attachment: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("attachment", "comprovante")
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _legacy_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_KINDS.get(value, value)
        return value

    @field_validator("author", mode="before")
    @classmethod
    def _legacy_author(cls, value: Any) -> Any:
        return SELF_AUTHOR if value == "eu" else value

    @field_validator("timestamp")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _settled_receipt(self) -> "Entry":
        # Older records kept "comprovante" as the kind after the value was filled in
        if self.kind == EntryKind.RECEIPT_PENDING and self.value > 0:
            self.kind = EntryKind.RECEIPT
        return self

    @field_serializer("value")
    def _serialize_value(self, value: Decimal) -> float:
        return float(value)

    @property
    def is_income(self) -> bool:
        return self.kind == EntryKind.INCOME

    def to_record(self) -> Dict[str, Any]:
        """JSON-shaped record for the persistence store"""
        return self.model_dump(mode="json")


# ============================================================================
# BUDGET SCHEMAS
# ============================================================================

AlertLevel = Literal["warning", "exceeded"]


class AlertMessage(BaseModel):
    """Budget threshold crossed for the current month"""
    level: AlertLevel
    category: str
    spent: Decimal
    limit: Decimal
    percentage: float


class BudgetStatus(BaseModel):
    """Month-to-date usage of one budget"""
    category: str
    spent: Decimal
    limit: Decimal
    percentage: float
    level: Optional[AlertLevel] = None
