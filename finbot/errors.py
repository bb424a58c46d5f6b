"""Error taxonomy for command processing"""


class FinanceBotError(Exception):
    """Base class for errors raised by the finance bot core"""


class EmptyLedger(FinanceBotError):
    """Raised when undoing with no recorded entries"""

    def __init__(self):
        super().__init__("ledger has no entries")


class NoReceiptPending(FinanceBotError):
    """Raised when amending a receipt but none is waiting for a value"""

    def __init__(self):
        super().__init__("no receipt-pending entry found")


class PersistenceWriteFailure(FinanceBotError):
    """A collection snapshot could not be written to the store"""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"failed to save collection {collection!r}: {reason}")


class AttachmentProcessingFailure(FinanceBotError):
    """A receipt attachment could not be fetched or stored"""
