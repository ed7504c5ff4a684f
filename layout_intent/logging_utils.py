from __future__ import annotations

import logging
import reprlib
from functools import wraps
from typing import Any, Callable, MutableMapping, Optional, Sequence, Tuple, TypeVar, cast

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxlist = 10
_repr.maxtuple = 10
_repr.maxset = 10


def _sequence_brackets(value: Sequence[Any]) -> Tuple[str, str]:
    if isinstance(value, tuple):
        return "(", ")"
    if isinstance(value, (set, frozenset)):
        return "{", "}"
    return "[", "]"


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 200) -> str:
    # Graph nodes render through their own __str__, which is far more useful
    # in traces than the dataclass repr.
    node_id = getattr(value, "id", None)
    if isinstance(node_id, int) and not isinstance(value, type):
        rendered = f"{type(value).__name__}#{node_id}<{value}>"
        if len(rendered) > max_length:
            return rendered[:max_length] + "... (truncated)"
        return rendered

    if isinstance(value, (list, tuple, set, frozenset)):
        open_br, close_br = _sequence_brackets(value)
        items = []
        for idx, item in enumerate(value):
            if idx >= max_items:
                items.append("...")
                break
            items.append(_safe_repr(item))
        return f"{open_br}{', '.join(items)}{close_br}"

    try:
        rendered = _repr.repr(value)
    except Exception as exc:  # pragma: no cover - defensive
        rendered = f"<repr-error {exc!r}>"
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = []
    if args:
        parts.append("args=[" + ", ".join(_safe_repr(arg) for arg in args) + "]")
    if kwargs:
        parts.append(
            "kwargs={"
            + ", ".join(f"{key}={_safe_repr(value)}" for key, value in kwargs.items())
            + "}"
        )
    if not parts:
        return "no-args"
    return ", ".join(parts)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that emits detailed DEBUG logs for function calls."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        qualname = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Entering %s (%s)", qualname, _format_arguments(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                if logger.isEnabledFor(logging.DEBUG):
                    logger.exception("Exception in %s", qualname)
                raise
            if logger.isEnabledFor(logging.DEBUG):
                if log_result:
                    logger.debug("Exiting %s -> %s", qualname, _safe_repr(result))
                else:
                    logger.debug("Exiting %s", qualname)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator
