"""Message processing entry point: one call per inbound chat event"""
import traceback
from typing import Optional

from finbot.channel import InboundMessage, MessageChannel
from finbot.logger import ErrorType, classify_error, create_logger
from finbot.services.access_control import GateDecision
from finbot.state import AppState
from finbot.tools import messages
from finbot.tools.command_parser import parse
from finbot.tools.handlers import HANDLERS

logger = create_logger("bot")


class MessageProcessor:
    """
    Runs each inbound message through the access gate, the command parser
    and the matching handler, then sends the reply.

    A failing message never propagates: the error is logged and a generic
    apology is sent instead.
    """

    def __init__(self, state: AppState, channel: MessageChannel):
        self.state = state
        self.channel = channel

    async def handle_message(self, message: InboundMessage) -> None:
        try:
            reply = await self.process(message)
            if reply:
                await self.channel.reply(message, reply)
        except Exception as e:
            logger.error("Failed to process message", {
                "error_type": classify_error(e).value,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            try:
                await self.channel.reply(message, messages.GENERIC_ERROR)
            except Exception as reply_error:
                logger.error("Failed to send error reply", {
                    "error_type": ErrorType.CHANNEL_ERROR.value,
                    "error": str(reply_error),
                })

    async def process(self, message: InboundMessage) -> Optional[str]:
        """Reply text for message, or None when it is dropped or matches no command"""
        gate = self.state.gate
        decision = gate.evaluate(message)
        if decision == GateDecision.DROP:
            return None
        if decision == GateDecision.BIND:
            gate.bind(message.chat_id)
            return messages.CHAT_BOUND

        logger.info("Message received", {"text": message.text, "author": message.author})

        command = parse(message.text, is_self=message.is_self, has_attachment=message.has_attachment)
        if command is None:
            return None

        self.state.store.drain_failures()
        with logger.command(command.kind.value, {"author": message.author}) as outcome:
            reply = await HANDLERS[command.kind](self.state, command, message)
            outcome["result"] = reply

        failed = self.state.store.drain_failures()
        if failed and reply and self.state.settings.warn_on_save_failure:
            reply = f"{reply}\n\n{messages.SAVE_FAILED_WARNING}"
        return reply
