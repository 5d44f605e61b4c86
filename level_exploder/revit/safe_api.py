# level_exploder/revit/safe_api.py

from typing import Any, Callable, Dict, Optional, TypeVar

T = TypeVar("T")


def safe_call(
    diag: Any,
    *,
    phase: str,
    callsite: str,
    fn: Callable[[], T],
    default: T,
    context: Optional[Dict[str, Any]] = None,
    policy: str = "default",  # "default" | "raise"
) -> T:
    """
    Execute fn() and handle exceptions in a controlled, observable way.

    policy:
      - "default": record error, return default
      - "raise":   record error, then re-raise
    """
    if policy not in ("default", "raise"):
        raise ValueError("policy must be 'default' or 'raise'")

    try:
        return fn()
    except Exception as e:
        ctx = context or {}

        if diag is not None:
            diag.error(
                phase=phase,
                callsite=callsite,
                message="Exception in safe_call",
                exc=e,
                level_name=ctx.get("level_name"),
                elem_id=ctx.get("elem_id"),
                view_id=ctx.get("view_id"),
                extra=ctx,
            )

        if policy == "raise":
            raise

        return default
