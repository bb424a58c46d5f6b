"""Receipt image storage"""
import time
from pathlib import Path

from finbot.channel import InboundMessage
from finbot.errors import AttachmentProcessingFailure
from finbot.logger import create_logger

logger = create_logger("receipt_storage")


class ReceiptStorage:
    """Writes receipt attachments as `comprovante_<ms>.<ext>` files"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    async def store(self, message: InboundMessage) -> str:
        """
        Download the message attachment and write it to the receipts directory.

        Returns:
            The stored file name, used as the entry's attachment reference

        Raises:
            AttachmentProcessingFailure: the download or the write failed
        """
        if message.fetch_attachment is None:
            raise AttachmentProcessingFailure("message has no downloadable attachment")
        try:
            media = await message.fetch_attachment()
            extension = media.mimetype.split("/")[-1] or "bin"
            filename = f"comprovante_{int(time.time() * 1000)}.{extension}"
            (self.directory / filename).write_bytes(media.data)
        except Exception as e:
            raise AttachmentProcessingFailure(str(e)) from e

        logger.info("Receipt stored", {"filename": filename, "bytes": len(media.data)})
        return filename
