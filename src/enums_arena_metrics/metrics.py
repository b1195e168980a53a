import os

# dataflow-bundle: kind, n

_ARENA_METRIC_KINDS = (
    "allocs",
    "clears",
    "hits",
    "stale",
    "tag_mismatch",
    "out_of_range",
    "updates",
    "borrows",
)

_arena_metrics = {kind: 0 for kind in _ARENA_METRIC_KINDS}


def _arena_metrics_enabled():
    value = os.environ.get("ENUMS_ARENA_METRICS", "").strip().lower()
    return value in ("1", "true", "yes", "on")


def arena_metrics_reset():
    for kind in _ARENA_METRIC_KINDS:
        _arena_metrics[kind] = 0


def arena_metrics_get():
    if not _arena_metrics_enabled():
        out = {kind: 0 for kind in _ARENA_METRIC_KINDS}
        out["hit_rate"] = 0.0
        return out
    out = dict(_arena_metrics)
    lookups = out["hits"] + out["stale"] + out["tag_mismatch"] + out["out_of_range"]
    out["hit_rate"] = (out["hits"] / lookups) if lookups else 0.0
    return out


def _arena_metrics_tick(kind, n=1):
    # Only counts when ENUMS_ARENA_METRICS is enabled.
    if not _arena_metrics_enabled():
        return
    if kind not in _arena_metrics:
        raise KeyError(f"unknown arena metric: {kind}")
    _arena_metrics[kind] += int(n)


__all__ = [
    "arena_metrics_reset",
    "arena_metrics_get",
    "_arena_metrics_enabled",
    "_arena_metrics_tick",
]
