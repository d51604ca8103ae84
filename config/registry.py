"""Process-wide registry of generation callables.

The HTTP server binds the configured chat-completions route under
``GENERATION_KEY`` at startup; tests bind scripted fakes under the same key.
"""
from typing import Any, Callable, Dict

GENERATION_KEY = "models.generation"

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    _REGISTRY[key] = fn


def unbind_model(key: str) -> None:
    _REGISTRY.pop(key, None)


def is_bound(key: str) -> bool:
    return key in _REGISTRY


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    try:
        return _REGISTRY[key]
    except KeyError:
        raise KeyError(f"Model not bound in registry: {key}") from None
