"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_provider: ContextVar[str] = ContextVar("provider", default="")
_component: ContextVar[str] = ContextVar("component", default="")
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def set_log_context(
    provider: Optional[str] = None,
    component: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> None:
    if provider is not None:
        _provider.set(provider)
    if component is not None:
        _component.set(component)
    if trace_id is not None:
        _trace_id.set(trace_id)


def get_log_context() -> Dict[str, str]:
    return {
        "provider": _provider.get(),
        "component": _component.get(),
        "trace_id": _trace_id.get(),
    }


def clear_log_context() -> None:
    _provider.set("")
    _component.set("")
    _trace_id.set("")
