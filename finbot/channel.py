"""
Message Channel boundary

The chat transport delivers one InboundMessage per event and accepts text
replies through a MessageChannel. Only a console channel ships here; a chat
network adapter implements the same `reply` coroutine.
"""
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, TextIO

from finbot.schemas.ledger import SELF_AUTHOR


@dataclass
class Attachment:
    """Downloaded media of a message"""
    mimetype: str
    data: bytes


@dataclass
class InboundMessage:
    """One inbound chat event"""
    text: str
    sender_id: str
    chat_id: str
    is_self: bool = False
    has_attachment: bool = False
    fetch_attachment: Optional[Callable[[], Awaitable[Attachment]]] = None

    @property
    def author(self) -> str:
        return SELF_AUTHOR if self.is_self else contact_id(self.sender_id)


def contact_id(sender_id: Optional[str]) -> str:
    """Phone number part of a sender id such as '5511999999999@c.us'"""
    return sender_id.split("@")[0] if sender_id else ""


class MessageChannel(Protocol):
    async def reply(self, message: InboundMessage, text: str) -> None:
        ...


class ConsoleChannel:
    """Writes replies to a text stream (stdout by default)"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    async def reply(self, message: InboundMessage, text: str) -> None:
        print(text, file=self.stream)
        print(file=self.stream)
        self.stream.flush()
