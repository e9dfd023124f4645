"""
Durable fragment storage.

The business domain is the only piece of onboarding state that survives a
full reload mid-workflow. It is kept under DOMAIN_KEY in a small key/value
store that plays the role of per-browser storage.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .state import Action, ActionType, WorkflowState

logger = logging.getLogger(__name__)

DOMAIN_KEY = "onboarding_domain"


class KeyValueStore(ABC):
    """Minimal string key/value persistence."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore(KeyValueStore):
    """In-process store (tests, and sessions that should not touch disk)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key/value store backed by a single JSON file.

    A missing or unreadable file is treated as empty so a corrupt file never
    blocks onboarding.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read onboarding storage {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring onboarding storage {self.path}: not a JSON object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def mirror_domain(storage: KeyValueStore):
    """
    Build a store listener that mirrors the committed business domain.

    Writes DOMAIN_KEY whenever the domain changes to a non-empty value.
    Clearing the domain does not erase the saved value.
    """

    def listener(action: Action, old: WorkflowState, new: WorkflowState) -> None:
        if action.type != ActionType.SET_BUSINESS_PROFILE:
            return
        domain = new.business_profile.domain
        if domain.strip() and domain != old.business_profile.domain:
            storage.set(DOMAIN_KEY, domain)

    return listener
