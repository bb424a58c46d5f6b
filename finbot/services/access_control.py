"""
Access Control Gate

Two durable facts decide whether a message reaches the command pipeline:
the owner conversation binding (unset -> set) and allow-list membership.

- first owner message while unbound  -> BIND (bind, confirm, consume)
- owner message in another chat      -> DROP
- contact not on the allow-list      -> DROP
- anything else                      -> PASS
"""
from enum import Enum
from typing import Any, List, Optional

from finbot.channel import InboundMessage, contact_id
from finbot.database import ALLOWLIST, OWNER_BINDING, CollectionStore
from finbot.logger import create_logger

logger = create_logger("access_control")


class GateDecision(str, Enum):
    BIND = "bind"
    DROP = "drop"
    PASS = "pass"


class AccessGate:
    """Owner binding plus allow-list, persisted as `ownerBinding` and `allowlist`"""

    def __init__(
        self,
        store: CollectionStore,
        allowlist: Optional[List[str]] = None,
        owner_chat_id: Optional[str] = None,
    ):
        self.store = store
        self.allowlist: List[str] = list(allowlist or [])
        self.owner_chat_id = owner_chat_id

    @classmethod
    def from_records(cls, store: CollectionStore, allowlist: Any, binding: Any) -> "AccessGate":
        contacts = [str(c) for c in allowlist] if isinstance(allowlist, list) else []
        chat_id = binding.get("chatId") if isinstance(binding, dict) else None
        return cls(store, contacts, chat_id)

    def binding_record(self) -> dict:
        return {"chatId": self.owner_chat_id}

    def evaluate(self, message: InboundMessage) -> GateDecision:
        if message.is_self:
            if self.owner_chat_id is None:
                return GateDecision.BIND
            if message.chat_id != self.owner_chat_id:
                logger.info("Ignoring owner message from another chat", {"chat_id": message.chat_id})
                return GateDecision.DROP
            return GateDecision.PASS

        sender = contact_id(message.sender_id)
        if sender not in self.allowlist:
            logger.info("Ignoring message from contact not on the allow-list", {"contact": sender})
            return GateDecision.DROP
        return GateDecision.PASS

    def bind(self, chat_id: str) -> None:
        self.owner_chat_id = chat_id
        self.store.save(OWNER_BINDING, self.binding_record())
        logger.info("Owner chat bound", {"chat_id": chat_id})

    def allow(self, contact: str) -> bool:
        if not contact or contact in self.allowlist:
            return False
        self.allowlist.append(contact)
        self.store.save(ALLOWLIST, list(self.allowlist))
        return True

    def remove(self, contact: str) -> bool:
        if contact not in self.allowlist:
            return False
        self.allowlist.remove(contact)
        self.store.save(ALLOWLIST, list(self.allowlist))
        return True

    def contacts(self) -> List[str]:
        return list(self.allowlist)
