"""
Resource monitoring and throttling helpers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import psutil

from config import AppConfig

from .cancellation import CancellationToken


@dataclass
class ResourceMonitor:
    """Hold back new copy work while CPU or RAM usage is above its limit."""

    max_cpu_percent: float = 0.0
    max_ram_percent: float = 0.0
    sleep_seconds: float = 0.5
    max_throttle_seconds: float = 15.0
    min_check_interval_seconds: float = 0.5
    logger: Optional[logging.Logger] = None
    _last_check: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.enabled:
            psutil.cpu_percent(interval=None)

    @classmethod
    def from_config(cls, config: AppConfig, logger: Optional[logging.Logger] = None) -> "ResourceMonitor":
        return cls(
            max_cpu_percent=float(config.get("resource_limits", "max_cpu_percent", default=0)),
            max_ram_percent=float(config.get("resource_limits", "max_ram_percent", default=0)),
            max_throttle_seconds=float(
                config.get("resource_limits", "max_throttle_seconds", default=15)
            ),
            min_check_interval_seconds=float(
                config.get("resource_limits", "min_check_interval_seconds", default=0.5)
            ),
            logger=logger,
        )

    @property
    def enabled(self) -> bool:
        return self.max_cpu_percent > 0 or self.max_ram_percent > 0

    def throttle(self, cancel_token: Optional[CancellationToken] = None) -> float:
        """Block while usage exceeds the limits; return seconds spent waiting."""
        if not self.enabled:
            return 0.0
        now = time.monotonic()
        if (now - self._last_check) < self.min_check_interval_seconds:
            return 0.0
        self._last_check = now
        start_time = time.monotonic()
        while True:
            cpu = psutil.cpu_percent(interval=0.1)
            ram = psutil.virtual_memory().percent
            cpu_over = self.max_cpu_percent > 0 and cpu > self.max_cpu_percent
            ram_over = self.max_ram_percent > 0 and ram > self.max_ram_percent
            waited = time.monotonic() - start_time
            if not (cpu_over or ram_over) or waited >= self.max_throttle_seconds:
                break
            if self.logger is not None:
                self.logger.debug("Throttling copy admission (cpu=%.0f%% ram=%.0f%%)", cpu, ram)
            if cancel_token is not None:
                if cancel_token.wait(self.sleep_seconds):
                    break
            else:
                time.sleep(self.sleep_seconds)
        return time.monotonic() - start_time
