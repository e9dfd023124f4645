"""
Onboarding State Management.

WorkflowState is the single aggregate for an onboarding session: current step,
the data accumulated by each step, and the loading/error flags.

All mutation goes through WorkflowStore.dispatch(), which applies the pure
reduce() transition. The sequence of states is therefore reproducible from the
sequence of dispatched actions (see replay()).
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterable

from .models import (
    BusinessProfile,
    CategoryLabel,
    PersistedCategory,
    Prompt,
    category_to_wire,
    dedupe,
    parse_category,
)
from .steps import TOTAL_STEPS

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Transitions understood by the reducer."""
    SET_STEP = "set_step"
    NEXT_STEP = "next_step"
    PREV_STEP = "prev_step"
    SET_BUSINESS_PROFILE = "set_business_profile"
    SET_COMPETITORS = "set_competitors"
    SET_CATEGORIES = "set_categories"
    SET_PROMPTS = "set_prompts"
    SET_LOADING = "set_loading"
    SET_ERROR = "set_error"
    RESET = "reset"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class WorkflowState:
    """
    Onboarding session state.

    Lives only in process memory for the duration of a session. The only
    fragment that outlives it is the business domain (see storage.mirror_domain).
    """
    current_step: int = 1
    total_steps: int = TOTAL_STEPS

    # Step 1: Business
    business_profile: BusinessProfile = field(default_factory=BusinessProfile)

    # Step 2-4: AI-assisted lists
    competitors: tuple[str, ...] = field(default_factory=tuple)
    categories: tuple[CategoryLabel | PersistedCategory, ...] = field(default_factory=tuple)
    prompts: tuple[Prompt, ...] = field(default_factory=tuple)

    # Status flags
    is_loading: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        """Serialize state to a JSON-friendly dict."""
        return {
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "business_profile": self.business_profile.to_dict(),
            "competitors": list(self.competitors),
            "categories": [category_to_wire(c) for c in self.categories],
            "prompts": [_prompt_to_dict(p) for p in self.prompts],
            "is_loading": self.is_loading,
            "error": self.error,
        }


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


# =============================================================================
# Reducer
# =============================================================================


def reduce(state: WorkflowState, action: Action) -> WorkflowState:
    """
    Apply one action to a state and return the next state.

    Pure and total: malformed payloads and unknown action types return the
    state unchanged instead of raising.
    """
    kind = action.type
    payload = action.payload

    if kind == ActionType.SET_STEP:
        if isinstance(payload, int) and not isinstance(payload, bool):
            return _with(state, current_step=_clamp(payload, 1, state.total_steps))

    elif kind == ActionType.NEXT_STEP:
        return _with(state, current_step=_clamp(state.current_step + 1, 1, state.total_steps))

    elif kind == ActionType.PREV_STEP:
        return _with(state, current_step=_clamp(state.current_step - 1, 1, state.total_steps))

    elif kind == ActionType.SET_BUSINESS_PROFILE:
        audiences = payload.get("target_audiences") if isinstance(payload, dict) else None
        if isinstance(payload, dict) and (audiences is None or isinstance(audiences, (list, tuple))):
            profile = state.business_profile.merge(payload)
            if "target_audiences" in payload:
                profile = profile.merge(
                    {"target_audiences": dedupe([a for a in profile.target_audiences if isinstance(a, str)])}
                )
            return _with(state, business_profile=profile)

    elif kind == ActionType.SET_COMPETITORS:
        if isinstance(payload, (list, tuple)):
            items = [c for c in payload if isinstance(c, str)]
            return _with(state, competitors=tuple(dedupe(items)))

    elif kind == ActionType.SET_CATEGORIES:
        if isinstance(payload, (list, tuple)):
            items = [c for c in payload if isinstance(c, (CategoryLabel, PersistedCategory))]
            return _with(state, categories=tuple(items))

    elif kind == ActionType.SET_PROMPTS:
        if isinstance(payload, (list, tuple)):
            return _with(state, prompts=tuple(p for p in payload if isinstance(p, Prompt)))

    elif kind == ActionType.SET_LOADING:
        return _with(state, is_loading=bool(payload))

    elif kind == ActionType.SET_ERROR:
        if payload is None or isinstance(payload, str):
            return _with(state, error=payload)

    elif kind == ActionType.RESET:
        return WorkflowState()

    return state  # Unknown or malformed - no transition


def _with(state: WorkflowState, **changes: Any) -> WorkflowState:
    return replace(state, **changes)


def _snapshot(items: Any) -> Any:
    """Copy list payloads so later edits to a draft cannot rewrite history."""
    return tuple(items) if isinstance(items, (list, tuple)) else items


def replay(actions: Iterable[Action], initial: WorkflowState | None = None) -> list[WorkflowState]:
    """Return every state produced by applying the actions in order (initial included)."""
    state = initial if initial is not None else WorkflowState()
    states = [state]
    for action in actions:
        state = reduce(state, action)
        states.append(state)
    return states


# =============================================================================
# Store
# =============================================================================

Listener = Callable[[Action, WorkflowState, WorkflowState], None]


class WorkflowStore:
    """
    Sole owner of a WorkflowState.

    Controllers never touch the state directly; every change is one of the
    operations below, each a synchronous dispatch that never raises.
    """

    def __init__(self, initial: WorkflowState | None = None):
        self._initial = initial if initial is not None else WorkflowState()
        self._state = self._initial
        self._history: list[Action] = []
        self._listeners: list[Listener] = []

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def history(self) -> tuple[Action, ...]:
        """Every action dispatched since the store was created."""
        return tuple(self._history)

    @property
    def initial_state(self) -> WorkflowState:
        return self._initial

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after each dispatch. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> WorkflowState:
        old = self._state
        self._state = reduce(old, action)
        self._history.append(action)

        for listener in list(self._listeners):
            try:
                listener(action, old, self._state)
            except Exception:
                logger.exception(f"Store listener failed on {action.type.value}")

        return self._state

    # =========================================================================
    # Operations
    # =========================================================================

    def set_step(self, step: int) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_STEP, step))

    def next_step(self) -> WorkflowState:
        return self.dispatch(Action(ActionType.NEXT_STEP))

    def prev_step(self) -> WorkflowState:
        return self.dispatch(Action(ActionType.PREV_STEP))

    def set_business_profile(self, partial: dict | None = None, **fields: Any) -> WorkflowState:
        """Shallow-merge into the business profile. Accepts a dict, keywords, or both."""
        payload = {} if partial is None else partial
        if fields and isinstance(payload, dict):
            payload = {**payload, **fields}
        return self.dispatch(Action(ActionType.SET_BUSINESS_PROFILE, payload))

    def set_competitors(self, competitors: list[str]) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_COMPETITORS, _snapshot(competitors)))

    def set_categories(self, categories: list) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_CATEGORIES, _snapshot(categories)))

    def set_prompts(self, prompts: list[Prompt]) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_PROMPTS, _snapshot(prompts)))

    def set_loading(self, loading: bool) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_LOADING, loading))

    def set_error(self, error: str | None) -> WorkflowState:
        return self.dispatch(Action(ActionType.SET_ERROR, error))

    def reset(self) -> WorkflowState:
        return self.dispatch(Action(ActionType.RESET))


# =============================================================================
# Action Serialization (for the action log)
# =============================================================================


def _prompt_to_dict(prompt: Prompt) -> dict:
    return {
        "text": prompt.text,
        "id": prompt.id,
        "category": category_to_wire(prompt.category) if prompt.category is not None else None,
    }


def _prompt_from_dict(data: dict) -> Prompt:
    category = data.get("category")
    return Prompt(
        text=data.get("text", ""),
        id=data.get("id"),
        category=parse_category(category) if category is not None else None,
    )


def action_to_dict(action: Action) -> dict:
    """Serialize an action to a JSON-friendly dict."""
    payload = action.payload
    if action.type == ActionType.SET_CATEGORIES and isinstance(payload, (list, tuple)):
        payload = [category_to_wire(c) for c in payload if isinstance(c, (CategoryLabel, PersistedCategory))]
    elif action.type == ActionType.SET_PROMPTS and isinstance(payload, (list, tuple)):
        payload = [_prompt_to_dict(p) for p in payload if isinstance(p, Prompt)]
    elif action.type == ActionType.SET_COMPETITORS and isinstance(payload, (list, tuple)):
        payload = list(payload)
    elif action.type == ActionType.SET_BUSINESS_PROFILE and isinstance(payload, dict):
        payload = {
            k: list(v) if isinstance(v, tuple) else v
            for k, v in payload.items()
        }
    return {"type": action.type.value, "payload": payload}


def action_from_dict(data: dict) -> Action:
    """Deserialize an action written by action_to_dict()."""
    kind = ActionType(data["type"])
    payload = data.get("payload")
    if kind == ActionType.SET_CATEGORIES and payload is not None:
        payload = tuple(parse_category(c) for c in payload)
    elif kind == ActionType.SET_PROMPTS and payload is not None:
        payload = tuple(_prompt_from_dict(p) for p in payload)
    elif kind == ActionType.SET_COMPETITORS and payload is not None:
        payload = tuple(payload)
    return Action(kind, payload)
