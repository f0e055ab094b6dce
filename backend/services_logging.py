"""
Logging service for concept operation events.
Logs to JSONL file for analysis and debugging.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional, List

import config

logger = logging.getLogger("kflow")

LOG_FILE_NAME = "operation_events.jsonl"


def get_log_file() -> Path:
    return Path(config.OPERATION_LOG_DIR) / LOG_FILE_NAME


def ensure_log_dir():
    """Ensure log directory exists."""
    Path(config.OPERATION_LOG_DIR).mkdir(parents=True, exist_ok=True)


def log_operation_event(
    operation: str,
    input_names: List[str],
    status: str,
    result_names: Optional[List[str]] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log a concept operation call to JSONL file.

    Args:
        operation: Operation name ("expand", "trace_path", ...)
        input_names: Names of the concepts the operation was called with
        status: "ok" or "error"
        result_names: Names of the concepts returned
        duration_ms: Wall-clock duration of the call
        error: Error message when status is "error"
        metadata: Scalar call arguments such as diversity or goal
    """
    if not config.ENABLE_OPERATION_EVENT_LOG:
        return

    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "operation": operation,
        "input_names": input_names,
        "status": status,
    }

    if result_names is not None:
        event["result_names"] = result_names
        event["result_count"] = len(result_names)

    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 1)

    if error is not None:
        event["error"] = error

    if metadata:
        event["metadata"] = metadata

    # Append to JSONL file
    try:
        ensure_log_dir()
        with open(get_log_file(), "a") as f:
            f.write(json.dumps(event) + "\n")
    except Exception as e:
        # Don't fail the operation if logging fails
        logger.warning(f"[Operation Logging] Failed to log event: {e}")


def get_recent_events(limit: int = 100) -> List[Dict[str, Any]]:
    """
    Get recent operation events from log file.

    Args:
        limit: Maximum number of events to return

    Returns:
        List of event dicts, most recent first
    """
    log_file = get_log_file()
    if not log_file.exists():
        return []

    events = []
    try:
        with open(log_file, "r") as f:
            lines = f.readlines()
            for line in lines[-limit:]:
                try:
                    events.append(json.loads(line.strip()))
                except json.JSONDecodeError:
                    continue

        events.sort(key=lambda e: e.get("timestamp", ""), reverse=True)
        return events
    except Exception as e:
        logger.error(f"[Operation Logging] Failed to read events: {e}")
        return []
