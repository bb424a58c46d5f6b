"""
Structured Logger for the finance bot

Provides centralized, structured logging for observability.
All logs are output as JSON to enable easy parsing and debugging.

Key features:
1. Structured JSON output (timestamp, level, event, metadata)
2. Command tracking (start, end, error) with duration
3. Error taxonomy (PARSE_ERROR, STORAGE_ERROR, ATTACHMENT_ERROR, etc.)
"""

import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from finbot.errors import AttachmentProcessingFailure, PersistenceWriteFailure


def _utc_now_iso() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ============================================================================
# TYPES
# ============================================================================

class LogLevel(str, Enum):
    """Log level enumeration"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class ErrorType(str, Enum):
    """Standard error types for consistent error handling"""
    VALIDATION_ERROR = "VALIDATION_ERROR"    # Invalid command arguments
    PARSE_ERROR = "PARSE_ERROR"              # Stored data could not be decoded
    STORAGE_ERROR = "STORAGE_ERROR"          # Collection load/save failed
    ATTACHMENT_ERROR = "ATTACHMENT_ERROR"    # Receipt download/write failed
    CHANNEL_ERROR = "CHANNEL_ERROR"          # Reply could not be delivered
    UNKNOWN_ERROR = "UNKNOWN_ERROR"          # Unexpected error


# ============================================================================
# LOGGER CLASS
# ============================================================================

class Logger:
    """Structured logger with JSON output"""

    def __init__(self, context: Optional[str] = None):
        self.context = context

    def _log(
        self,
        level: LogLevel,
        event: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a structured message"""
        entry = {
            "timestamp": _utc_now_iso(),
            "level": level.value,
            "event": event,
        }

        if self.context:
            entry["context"] = self.context

        if metadata:
            entry["metadata"] = metadata

        # One JSON object per line
        output = json.dumps(entry, default=str, ensure_ascii=False)

        if level in (LogLevel.ERROR, LogLevel.WARN):
            print(output, file=sys.stderr)
        else:
            print(output, file=sys.stdout)

    def debug(self, event: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message"""
        self._log(LogLevel.DEBUG, event, metadata)

    def info(self, event: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log info message"""
        self._log(LogLevel.INFO, event, metadata)

    def warn(self, event: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message"""
        self._log(LogLevel.WARN, event, metadata)

    def error(self, event: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log error message"""
        self._log(LogLevel.ERROR, event, metadata)

    def command_start(self, command: str, args: Optional[Dict[str, Any]] = None) -> str:
        """Log the start of a command, returns timestamp for duration tracking"""
        started_at = _utc_now_iso()

        metadata = {
            "command": command,
            "started_at": started_at,
        }
        if args:
            metadata["arguments"] = args

        self.debug("Command started", metadata)
        return started_at

    def command_end(
        self,
        command: str,
        started_at: str,
        result: Optional[Any] = None,
    ) -> None:
        """Log successful command completion"""
        metadata = {
            "command": command,
            "duration_ms": _duration_ms(started_at),
            "success": True,
        }
        if result is not None:
            metadata["result_summary"] = self._summarize_result(result)

        self.info("Command completed", metadata)

    def command_error(
        self,
        command: str,
        started_at: str,
        error: Exception,
        error_type: ErrorType = ErrorType.UNKNOWN_ERROR,
    ) -> None:
        """Log command error"""
        metadata = {
            "command": command,
            "duration_ms": _duration_ms(started_at),
            "success": False,
            "error_type": error_type.value,
            "error_message": str(error),
        }

        self.error("Command failed", metadata)

    def _summarize_result(self, result: Any) -> Any:
        """Summarize result for logging (avoid logging huge objects)"""
        if result is None:
            return None

        if isinstance(result, (list, tuple)):
            return {
                "_type": "array",
                "length": len(result),
                "sample": list(result[:3]),
            }

        if isinstance(result, dict):
            return {
                "_type": "object",
                "keys": list(result.keys())[:10],
            }

        if isinstance(result, str):
            # Replies can be long report blocks
            return result if len(result) <= 120 else result[:117] + "..."

        if isinstance(result, (int, float, bool)):
            return result

        return {"_type": type(result).__name__}

    @contextmanager
    def command(self, command: str, args: Optional[Dict[str, Any]] = None):
        """Context manager for commands with automatic logging; set outcome["result"] to log a summary"""
        started_at = self.command_start(command, args)
        outcome: Dict[str, Any] = {}
        try:
            yield outcome
            self.command_end(command, started_at, outcome.get("result"))
        except Exception as e:
            self.command_error(command, started_at, e, classify_error(e))
            raise


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def _duration_ms(started_at: str) -> int:
    start_dt = datetime.fromisoformat(started_at.replace("Z", "+00:00"))
    return int((datetime.now(timezone.utc) - start_dt).total_seconds() * 1000)


def classify_error(error: Exception) -> ErrorType:
    """Helper to classify errors into ErrorType"""
    if isinstance(error, PersistenceWriteFailure):
        return ErrorType.STORAGE_ERROR
    if isinstance(error, AttachmentProcessingFailure):
        return ErrorType.ATTACHMENT_ERROR

    error_msg = str(error).lower()

    if "validation" in error_msg:
        return ErrorType.VALIDATION_ERROR
    if "database" in error_msg or "sqlite" in error_msg or "sql" in error_msg:
        return ErrorType.STORAGE_ERROR
    if "parse" in error_msg or "json" in error_msg or "decode" in error_msg:
        return ErrorType.PARSE_ERROR

    return ErrorType.UNKNOWN_ERROR


# ============================================================================
# EXPORTS
# ============================================================================

def create_logger(context: str) -> Logger:
    """Create a logger with a specific context"""
    return Logger(context)
