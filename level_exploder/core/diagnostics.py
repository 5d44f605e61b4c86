# level_exploder/core/diagnostics.py

def _exc_to_str(e):
    try:
        return str(e)
    except Exception:
        return "<unstringifiable exception>"


class Diagnostics(object):
    """
    Structured diagnostics recorder (host-safe minimal stdlib).

    - Bounded event storage
    - Aggregated counts
    - JSON-safe output

    The pure layout core never records events; the pipeline and the Revit
    bridge do.
    """

    def __init__(self, max_events=200):
        self.max_events = max_events

        self.events = []
        self.counts = {}
        self.dropped_events = 0

        # dedupe_key -> {index: int|None, suppressed: int}
        self._dedupe = {}

    def _count_key(self, severity, phase, callsite, exc_type):
        return "{}|{}|{}|{}".format(severity, phase, callsite, exc_type or "")

    def _record(self, payload):
        key = self._count_key(
            payload.get("severity"),
            payload.get("phase"),
            payload.get("callsite"),
            payload.get("exc_type"),
        )
        self.counts[key] = self.counts.get(key, 0) + 1

        if len(self.events) >= self.max_events:
            self.dropped_events += 1
            return None

        self.events.append(payload)
        return len(self.events) - 1

    def _payload(self, severity, phase, callsite, message, exc, level_name, elem_id, view_id, extra):
        return {
            "severity": severity,
            "phase": phase,
            "callsite": callsite,
            "message": message,
            "exc_type": type(exc).__name__ if exc is not None else None,
            "exc_message": _exc_to_str(exc) if exc is not None else None,
            "level_name": level_name,
            "elem_id": elem_id,
            "view_id": view_id,
            "extra": extra or {},
        }

    def debug(self, phase, callsite, message, level_name=None, elem_id=None, view_id=None, extra=None):
        self._record(
            self._payload("DEBUG", phase, callsite, message, None, level_name, elem_id, view_id, extra)
        )

    def info(self, phase, callsite, message, level_name=None, elem_id=None, view_id=None, extra=None):
        self._record(
            self._payload("INFO", phase, callsite, message, None, level_name, elem_id, view_id, extra)
        )

    def warn(self, phase, callsite, message, level_name=None, elem_id=None, view_id=None, extra=None):
        self._record(
            self._payload("WARN", phase, callsite, message, None, level_name, elem_id, view_id, extra)
        )

    def error(
        self,
        phase,
        callsite,
        message,
        exc=None,
        level_name=None,
        elem_id=None,
        view_id=None,
        extra=None,
    ):
        self._record(
            self._payload("ERROR", phase, callsite, message, exc, level_name, elem_id, view_id, extra)
        )

    def debug_dedupe(
        self,
        dedupe_key,
        phase,
        callsite,
        message,
        level_name=None,
        elem_id=None,
        view_id=None,
        extra=None,
    ):
        """Record at most one DEBUG event per dedupe_key, with a suppressed_count.

        - First call records a DEBUG event with extra.suppressed_count=0.
        - Subsequent calls increment suppressed_count without recording more events.

        Used for per-element failures inside a level (e.g. read-only offsets).
        """
        entry = self._dedupe.get(dedupe_key)
        if entry is None:
            payload_extra = dict(extra or {})
            payload_extra.setdefault("suppressed_count", 0)
            idx = self._record(
                self._payload(
                    "DEBUG", phase, callsite, message, None, level_name, elem_id, view_id, payload_extra
                )
            )
            self._dedupe[dedupe_key] = {"index": idx, "suppressed": 0}
            return

        entry["suppressed"] += 1
        idx = entry.get("index")
        if idx is not None and 0 <= idx < len(self.events):
            ev_extra = self.events[idx].get("extra")
            if isinstance(ev_extra, dict):
                ev_extra["suppressed_count"] = entry["suppressed"]

    def has_errors(self):
        return any(k.startswith("ERROR|") for k in self.counts)

    def to_dict(self):
        return {
            "max_events": self.max_events,
            "num_events": len(self.events),
            "dropped_events": self.dropped_events,
            "counts": dict(self.counts),
            "events": list(self.events),
        }
