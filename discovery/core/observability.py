"""Observability context carried by every sink component.

Holds the logger and a private Prometheus registry so nothing in the
process depends on module-level singletons.
"""
from __future__ import annotations

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter

from discovery.core.logging import SERVICE_NAME


class Observability:
    """Logger plus the sink's Prometheus metrics, scoped to one registry."""

    def __init__(self, logger: Optional[logging.Logger] = None, registry: Optional[CollectorRegistry] = None):
        self._logger = logger or logging.getLogger(SERVICE_NAME)
        self.registry = registry or CollectorRegistry()
        self.files = Counter(
            "discovery_telegraf_files_total",
            "Telegraf config persistence attempts",
            ["source", "status"],
            registry=self.registry,
        )
        self.errors = Counter(
            "discovery_telegraf_errors_total",
            "Telegraf config generation errors",
            ["source", "kind"],
            registry=self.registry,
        )
        self.records = Counter(
            "discovery_telegraf_records_total",
            "Telegraf input records generated",
            ["input"],
            registry=self.registry,
        )

    def logs(self) -> logging.Logger:
        return self._logger
