"""
Action registry and metadata:
- actions are registered by name, each bound to a pydantic params model
- validate_spec() checks a spec before anything touches the browser
"""
# @file purpose: Provide action registry, metadata, and spec validation.

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, TypeAdapter

from .action import ActionSpec

# (iface: AutomationInterface, params: BaseModel | None) -> ActionResult
ActionFn = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ActionMeta:
    name: str
    params_model: Optional[Type[BaseModel]] = None
    summary: str = ""


_REGISTRY: Dict[str, ActionFn] = {}
_META: Dict[str, ActionMeta] = {}


def action(
    name: str, *, params_model: Optional[Type[BaseModel]] = None
) -> Callable[[ActionFn], ActionFn]:
    """
    Register an action implementation:
        @action("focus_window", params_model=FocusWindowParams)
        async def focus_window(iface, params): ...
    """

    def deco(fn: ActionFn) -> ActionFn:
        register(name, fn, params_model=params_model)
        return fn

    return deco


def register(name: str, fn: ActionFn, *, params_model: Optional[Type[BaseModel]] = None) -> None:
    """Non-decorator form, handy for tests and dynamic wiring."""
    doc = inspect.getdoc(fn) or ""
    _REGISTRY[name] = fn
    _META[name] = ActionMeta(
        name=name, params_model=params_model, summary=doc.splitlines()[0] if doc else ""
    )


def get_action(name: str) -> ActionFn:
    try:
        return _REGISTRY[name]
    except KeyError as e:
        raise KeyError(f"Action not registered: {name}") from e


def get_meta(name: str) -> ActionMeta:
    try:
        return _META[name]
    except KeyError as e:
        raise KeyError(f"Action not registered (no metadata): {name}") from e


def list_actions() -> Dict[str, ActionMeta]:
    return dict(sorted(_META.items()))


def validate_spec(spec: ActionSpec) -> Tuple[ActionMeta, Optional[BaseModel]]:
    """
    1) the action must be registered (KeyError otherwise)
    2) args are validated by its params model (ValidationError otherwise)
    3) returns (ActionMeta, parsed params | None)
    """
    meta = get_meta(spec.name)

    if meta.params_model is None:
        if spec.args:
            raise ValueError(f"Action {spec.name} takes no arguments, got {sorted(spec.args)}")
        return meta, None

    params_obj = TypeAdapter(meta.params_model).validate_python(spec.args)
    return meta, params_obj


def _reset_registry_for_tests() -> None:
    _REGISTRY.clear()
    _META.clear()
