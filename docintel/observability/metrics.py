# docintel/observability/metrics.py
from __future__ import annotations

import re
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Tuple

LabelSet = Tuple[Tuple[str, str], ...]


@dataclass
class TimerStat:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


def _labels(labels: Dict[str, Any]) -> LabelSet:
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _metric_name(name: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9_:]", "_", name)
    if not re.match(r"^[a-zA-Z_:]", cleaned):
        cleaned = f"metric_{cleaned}"
    return cleaned


def _format_labels(labels: LabelSet) -> str:
    if not labels:
        return ""
    rendered = []
    for key, value in labels:
        key = re.sub(r"[^a-zA-Z0-9_]", "_", key)
        value = value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')
        rendered.append(f'{key}="{value}"')
    return "{" + ",".join(rendered) + "}"


class MetricsRegistry:
    """In-memory counters and millisecond timers, rendered in Prometheus text format."""

    def __init__(self):
        self._lock = Lock()
        self._counters: Dict[str, Dict[LabelSet, int]] = {}
        self._timers: Dict[str, Dict[LabelSet, TimerStat]] = {}

    def inc(self, name: str, value: int = 1, **labels: Any) -> None:
        key = _labels(labels)
        with self._lock:
            series = self._counters.setdefault(_metric_name(name), {})
            series[key] = series.get(key, 0) + int(value)

    def observe_ms(self, name: str, value_ms: float, **labels: Any) -> None:
        key = _labels(labels)
        with self._lock:
            series = self._timers.setdefault(_metric_name(name), {})
            stat = series.setdefault(key, TimerStat())
            stat.count += 1
            stat.total_ms += float(value_ms)
            stat.max_ms = max(stat.max_ms, float(value_ms))

    def counter_value(self, name: str, **labels: Any) -> int:
        with self._lock:
            return self._counters.get(_metric_name(name), {}).get(_labels(labels), 0)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            counters = {
                name: {_format_labels(k): v for k, v in series.items()}
                for name, series in self._counters.items()
            }
            timers = {
                name: {
                    _format_labels(k): {
                        "count": stat.count,
                        "total_ms": round(stat.total_ms, 3),
                        "avg_ms": round(stat.avg_ms, 3),
                        "max_ms": round(stat.max_ms, 3),
                    }
                    for k, stat in series.items()
                }
                for name, series in self._timers.items()
            }
        return {"counters": counters, "timers": timers}

    def render_prometheus(self) -> str:
        lines: List[str] = []
        with self._lock:
            for name in sorted(self._counters):
                lines.append(f"# TYPE {name} counter")
                for labels, value in sorted(self._counters[name].items()):
                    lines.append(f"{name}{_format_labels(labels)} {value}")

            for name in sorted(self._timers):
                lines.append(f"# TYPE {name}_count counter")
                lines.append(f"# TYPE {name}_sum counter")
                lines.append(f"# TYPE {name}_max gauge")
                for labels, stat in sorted(self._timers[name].items()):
                    label_text = _format_labels(labels)
                    lines.append(f"{name}_count{label_text} {stat.count}")
                    lines.append(f"{name}_sum{label_text} {round(stat.total_ms, 3)}")
                    lines.append(f"{name}_max{label_text} {round(stat.max_ms, 3)}")

        return "\n".join(lines) + "\n" if lines else ""

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timers.clear()


metrics = MetricsRegistry()
