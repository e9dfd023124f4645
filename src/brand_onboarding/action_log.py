"""
Onboarding Action Log.

Lightweight observability for onboarding sessions, opt-in via
ONBOARDING_LOG_ACTIONS=1.

Features:
- One JSONL file per session (easy to parse, tail -f friendly)
- Every dispatched store action, in order, so a session can be replayed
- Navigation and generation events with smart truncation

Usage:
    from brand_onboarding.action_log import ActionLogger, load_actions
    from brand_onboarding.state import replay

    log = ActionLogger(log_dir=Path("session_logs"))
    store.subscribe(log.record_action)
    ...
    path = log.close()

    states = replay(load_actions(path))

Log format (JSONL):
    {"ts": "2026-01-01T17:30:00", "event": "action", "seq": 3, "type": "next_step", "payload": null}
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .state import Action, WorkflowState, action_from_dict, action_to_dict

# Max string length before truncation (custom events only; actions are kept whole)
MAX_STRING_LEN = 200

# Max list items to show
MAX_LIST_ITEMS = 5


def _truncate_value(value: Any, depth: int = 0) -> Any:
    """
    Smart truncation of values for logging.

    - Strings > MAX_STRING_LEN get truncated with "..."
    - Lists > MAX_LIST_ITEMS show first N + count
    - Nested structures respect depth limit
    """
    if depth > 3:
        return "<nested>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        if len(value) > MAX_STRING_LEN:
            return value[:MAX_STRING_LEN] + f"... ({len(value)} chars)"
        return value

    if isinstance(value, (list, tuple)):
        items = [_truncate_value(v, depth + 1) for v in value[:MAX_LIST_ITEMS]]
        if len(value) > MAX_LIST_ITEMS:
            items.append(f"... +{len(value) - MAX_LIST_ITEMS} more")
        return items

    if isinstance(value, dict):
        return {k: _truncate_value(v, depth + 1) for k, v in value.items()}

    return str(value)[:MAX_STRING_LEN]


class ActionLogger:
    """Per-session logger that writes JSONL to a file."""

    def __init__(
        self,
        log_dir: Path | str = Path("session_logs"),
        session_id: str | None = None,
        enabled: bool = True,
    ):
        self.enabled = enabled
        self._seq = 0

        if not enabled:
            self.log_file = None
            self.log_path = None
            return

        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        if session_id is None:
            session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.session_id = session_id
        self.log_path = log_dir / f"onboarding_{session_id}.jsonl"
        self.log_file = open(self.log_path, "a", encoding="utf-8")

        self._write({"event": "session_start", "session_id": session_id})

    def _write(self, data: dict) -> None:
        if not self.enabled or self.log_file is None:
            return

        entry = {"ts": datetime.now().isoformat(), **data}
        self.log_file.write(json.dumps(entry, default=str) + "\n")
        self.log_file.flush()

    # =========================================================================
    # Events
    # =========================================================================

    def record_action(self, action: Action, old: WorkflowState, new: WorkflowState) -> None:
        """Store listener: log one dispatched action."""
        self._seq += 1
        self._write({
            "event": "action",
            "seq": self._seq,
            **action_to_dict(action),
            "step": new.current_step,
        })

    def navigation(self, destination: str) -> None:
        self._write({"event": "navigation", "destination": destination})

    def log(self, event_type: str, **kwargs) -> None:
        """Log custom event."""
        self._write({"event": event_type, **_truncate_value(kwargs)})

    def close(self) -> str | None:
        """Close the log file. Returns log path."""
        if self.log_file:
            self._write({"event": "session_end", "total_actions": self._seq})
            self.log_file.close()
            self.log_file = None
            return str(self.log_path)
        return None


def load_actions(path: Path | str) -> list[Action]:
    """Read back the actions recorded in a session log, in dispatch order."""
    actions = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            entry = json.loads(line)
            if entry.get("event") == "action":
                actions.append(action_from_dict(entry))
    return actions
