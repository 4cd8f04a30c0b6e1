"""In-memory counters rendered in Prometheus text format for /metrics."""

from typing import Dict


COUNTERS: Dict[str, str] = {
    "orders_placed_total": "Total number of orders placed",
    "order_status_updates_total": "Total number of order status updates",
    "catalog_lookup_failures_total": "Total number of catalog lookups that raised an error",
    "unresolved_items_total": "Total number of line items whose vendor could not be resolved",
    "order_total_mismatches_total": "Total number of orders whose client total differs from the item sum",
    "users_registered_total": "Total number of registered users",
    "logins_failed_total": "Total number of rejected login attempts",
    "menu_items_created_total": "Total number of menu items created",
}


class MetricsCollector:
    """Simple in-memory metrics collector."""

    def __init__(self):
        self._counters: Dict[str, int] = {name: 0 for name in COUNTERS}

    def increment(self, metric_name: str, value: int = 1) -> None:
        """Increment a counter metric. Unknown names are ignored."""
        if metric_name in self._counters:
            self._counters[metric_name] += value

    def get(self, metric_name: str) -> int:
        return self._counters.get(metric_name, 0)

    def get_prometheus_text(self) -> str:
        lines = []
        for name, help_text in COUNTERS.items():
            lines.append(f"# HELP {name} {help_text}")
            lines.append(f"# TYPE {name} counter")
            lines.append(f"{name} {self._counters[name]}")
            lines.append("")
        return "\n".join(lines)


# Global metrics instance
metrics = MetricsCollector()
