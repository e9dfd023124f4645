"""
Onboarding Domain Models.

Business profile, categories and prompts as they live inside WorkflowState,
plus converters to and from the shapes the remote service sends.

The service has returned categories both as bare strings and as saved records
with ids, and prompts in three different shapes. Everything is normalized here
so the rest of the package never inspects dict shapes.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Sequence

from .errors import MalformedResponseError


# =============================================================================
# Business Profile
# =============================================================================


@dataclass(frozen=True)
class BusinessProfile:
    """Step 1 data: who the business is and who it sells to."""
    domain: str = ""
    business_name: str = ""
    description: str = ""
    target_audiences: tuple[str, ...] = field(default_factory=tuple)

    def merge(self, partial: dict[str, Any]) -> "BusinessProfile":
        """Shallow-merge known fields; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        updates = {k: v for k, v in partial.items() if k in known}
        if "target_audiences" in updates:
            audiences = updates["target_audiences"]
            if audiences is None:
                updates["target_audiences"] = ()
            elif isinstance(audiences, (list, tuple)):
                updates["target_audiences"] = tuple(audiences)
            else:
                del updates["target_audiences"]
        for key in ("domain", "business_name", "description"):
            if key in updates and updates[key] is None:
                updates[key] = ""
            elif key in updates and not isinstance(updates[key], str):
                del updates[key]
        return replace(self, **updates)

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "business_name": self.business_name,
            "description": self.description,
            "target_audiences": list(self.target_audiences),
        }


# =============================================================================
# Categories (tagged variant)
# =============================================================================


@dataclass(frozen=True)
class CategoryLabel:
    """A category known only by its label (not yet saved server-side)."""
    name: str


@dataclass(frozen=True)
class PersistedCategory:
    """A category record saved by the service, with a stable id."""
    id: str
    name: str


Category = CategoryLabel | PersistedCategory


def category_name(category: Category) -> str:
    """Display name for either variant."""
    return category.name


def category_key(category: Category) -> str:
    """Identity used for selection: the id when persisted, else the label."""
    if isinstance(category, PersistedCategory):
        return category.id
    return category.name


def category_to_wire(category: Category) -> str | dict:
    if isinstance(category, PersistedCategory):
        return {"_id": category.id, "categoryName": category.name}
    return category.name


def parse_category(raw: Any) -> Category:
    """Parse one category as sent by the service."""
    if isinstance(raw, str):
        return CategoryLabel(name=raw)

    if isinstance(raw, dict):
        name = raw.get("categoryName") or raw.get("name")
        cat_id = raw.get("_id") or raw.get("id")
        if isinstance(name, str) and name:
            if cat_id is not None:
                return PersistedCategory(id=str(cat_id), name=name)
            return CategoryLabel(name=name)

    raise MalformedResponseError(f"Unrecognized category: {raw!r}")


# =============================================================================
# Prompts
# =============================================================================


@dataclass(frozen=True)
class Prompt:
    """An AI-generated content prompt attached to a category."""
    text: str
    category: Category | None = None
    id: str | None = None

    @property
    def category_name(self) -> str:
        if self.category is None:
            return "Unknown Category"
        return category_name(self.category)

    def with_text(self, text: str) -> "Prompt":
        return replace(self, text=text)


def parse_prompt(raw: Any) -> Prompt:
    """
    Parse one prompt as sent by the service.

    Accepted shapes:
    - {"promptDoc": {"_id", "promptText", "categoryId"}, "catDoc": {"_id", "categoryName"}}
    - {"id", "promptText", "categoryName"}
    - {"prompt", "category"}  (legacy)
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"Unrecognized prompt: {raw!r}")

    if isinstance(raw.get("promptDoc"), dict):
        doc = raw["promptDoc"]
        cat_doc = raw.get("catDoc")
        category = None
        if isinstance(cat_doc, dict):
            category = parse_category(cat_doc)
        prompt_id = doc.get("_id")
        return Prompt(
            text=doc.get("promptText") or "",
            category=category,
            id=str(prompt_id) if prompt_id is not None else None,
        )

    if "promptText" in raw:
        name = raw.get("categoryName")
        prompt_id = raw.get("id") or raw.get("_id")
        return Prompt(
            text=raw.get("promptText") or "",
            category=CategoryLabel(name=name) if name else None,
            id=str(prompt_id) if prompt_id is not None else None,
        )

    if "prompt" in raw:
        name = raw.get("category")
        return Prompt(
            text=raw.get("prompt") or "",
            category=CategoryLabel(name=name) if isinstance(name, str) and name else None,
        )

    raise MalformedResponseError(f"Unrecognized prompt: {raw!r}")


# =============================================================================
# List Editing
# =============================================================================


def append_unique(items: Sequence[str], value: str) -> list[str]:
    """Add a trimmed value unless it is empty or already present (exact match)."""
    value = (value or "").strip()
    if not value or value in items:
        return list(items)
    return [*items, value]


def remove_at(items: Sequence, index: int) -> list:
    """Remove the item at a position; out-of-range positions change nothing."""
    if index < 0 or index >= len(items):
        return list(items)
    return [item for i, item in enumerate(items) if i != index]


def dedupe(items: Sequence[str]) -> list[str]:
    """Drop empty entries and repeats, keeping first-seen order."""
    result: list[str] = []
    for item in items:
        result = append_unique(result, item)
    return result
