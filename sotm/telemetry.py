"""Telemetry sinks for the firing cycle.

Telemetry is best-effort: the control loop publishes named values every
tick and never depends on the result. Sinks:

- NullTelemetry: discards everything
- LoggingTelemetry: emits each value as a DEBUG log record
- RecordingTelemetry: keeps per-key history in memory, exportable to polars

Example:
    >>> from sotm.telemetry import RecordingTelemetry
    >>>
    >>> telemetry = RecordingTelemetry()
    >>> telemetry.publish("Auto Shoot/Iterations", 2)
    >>> telemetry.latest("Auto Shoot/Iterations")
    2
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import polars as pl

logger = logging.getLogger(__name__)

TelemetryValue = bool | int | float | str


@runtime_checkable
class TelemetrySink(Protocol):
    """Anything that accepts named telemetry values."""

    def publish(self, key: str, value: TelemetryValue) -> None:
        """Publish one value under ``key``."""
        ...


class NullTelemetry:
    """Sink that discards everything."""

    def publish(self, key: str, value: TelemetryValue) -> None:
        pass


@dataclass
class LoggingTelemetry:
    """Sink that writes each value to a logger at DEBUG level."""
    logger: logging.Logger = field(default_factory=lambda: logger)

    def publish(self, key: str, value: TelemetryValue) -> None:
        self.logger.debug("%s = %s", key, value)


@dataclass
class RecordingTelemetry:
    """Sink that records every published value, in order.

    Each publish is stamped with the current ``sample`` index; call
    ``next_sample()`` once per tick to advance it.
    """
    _history: dict[str, list[tuple[int, TelemetryValue]]] = field(
        default_factory=lambda: defaultdict(list), init=False, repr=False
    )
    _sample: int = field(default=0, init=False, repr=False)

    def publish(self, key: str, value: TelemetryValue) -> None:
        self._history[key].append((self._sample, value))

    def next_sample(self) -> None:
        """Advance the sample counter."""
        self._sample += 1

    @property
    def keys(self) -> list[str]:
        """All keys published so far."""
        return list(self._history)

    def history(self, key: str) -> list[TelemetryValue]:
        """All values published under ``key``, oldest first."""
        return [value for _, value in self._history.get(key, [])]

    def latest(self, key: str) -> TelemetryValue | None:
        """Most recent value under ``key``, or None if never published."""
        values = self._history.get(key)
        return values[-1][1] if values else None

    def clear(self) -> None:
        """Drop all recorded values."""
        self._history.clear()
        self._sample = 0

    def to_dataframe(self) -> pl.DataFrame:
        """Long-format frame with columns sample, key, value (as float).

        Booleans become 0.0/1.0; non-numeric values are dropped.
        """
        rows: dict[str, list] = {"sample": [], "key": [], "value": []}
        for key, samples in self._history.items():
            for sample, value in samples:
                if isinstance(value, str):
                    continue
                rows["sample"].append(sample)
                rows["key"].append(key)
                rows["value"].append(float(value))
        return pl.DataFrame(
            rows,
            schema={"sample": pl.Int64, "key": pl.Utf8, "value": pl.Float64},
        )
