"""Built-in multi-gauge panel: the producer and consumer ends of the bus.

:class:`PanelInstrument` plays the instrument's update loop: on every render
frame it reads SimVars from the engine and publishes them. :class:`PanelView`
plays the display component: it holds precision-gated subjects whose values
are read at render time.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from types import MappingProxyType

from pysimvar._constants import (
    AIRSPEED_INDICATED,
    DEFAULT_RENDER_HZ,
    FLAPS_HANDLE_INDEX,
    FUEL_TOTAL_CAPACITY,
    FUEL_TOTAL_QUANTITY,
    TRAILING_EDGE_FLAPS_LEFT_PERCENT,
)
from pysimvar._scheduler import RepeatingTask
from pysimvar.bus import ConsumerSubject, EventBus
from pysimvar.engine import StateEngine

_logger = logging.getLogger(__name__)


class PanelEvents(StrEnum):
    INDICATED_AIRSPEED = "indicated_airspeed"  # knots
    FUEL_TOTAL_GAL = "fuel_total_gal"  # gallons
    FUEL_TOTAL_CAPACITY = "fuel_total_capacity"  # gallons
    FLAPS_INDEX = "flaps_index"  # handle detent
    FLAPS_PERCENT = "flaps_percent"  # trailing edge, 0-100


#: Which SimVar feeds each panel topic.
PANEL_SIMVARS = MappingProxyType(
    {
        PanelEvents.INDICATED_AIRSPEED: AIRSPEED_INDICATED,
        PanelEvents.FUEL_TOTAL_GAL: FUEL_TOTAL_QUANTITY,
        PanelEvents.FUEL_TOTAL_CAPACITY: FUEL_TOTAL_CAPACITY,
        PanelEvents.FLAPS_INDEX: FLAPS_HANDLE_INDEX,
        PanelEvents.FLAPS_PERCENT: TRAILING_EDGE_FLAPS_LEFT_PERCENT,
    }
)

# (fraction floor, colour), highest first.
_FUEL_BANDS: tuple[tuple[float, str], ...] = (
    (0.75, "#00ff6a"),
    (0.50, "#b4ff22"),
    (0.30, "#ffc400"),
    (0.15, "#ff8200"),
)
_FUEL_EMPTY_COLOR = "#ff3232"


def fuel_color(fraction: float) -> str:
    """Arc colour for the fraction of fuel remaining."""
    for floor, color in _FUEL_BANDS:
        if fraction >= floor:
            return color
    return _FUEL_EMPTY_COLOR


class PanelInstrument:
    """Reads SimVars and publishes them to the bus on the render clock."""

    def __init__(
        self,
        engine: StateEngine,
        bus: EventBus,
        *,
        render_hz: float = DEFAULT_RENDER_HZ,
    ) -> None:
        self._engine = engine
        self._bus = bus
        self._frames = 0
        self._render = RepeatingTask(self.update, 1.0 / render_hz, name="panel-render")

    def update(self) -> None:
        """One render frame: publish every panel topic with change detection."""
        for topic, simvar in PANEL_SIMVARS.items():
            self._bus.publish(topic, self._engine.get_value(simvar), change_detection_only=True)
        self._frames += 1

    def start(self) -> None:
        self._render.start()
        _logger.info("PanelInstrument render loop started (%.0f Hz)", 1.0 / self._render.interval)

    def stop(self) -> None:
        self._render.cancel()

    @property
    def is_running(self) -> bool:
        return self._render.is_running

    @property
    def frames(self) -> int:
        return self._frames


class PanelView:
    """Gauge-side subscriptions with the precisions the panel displays."""

    def __init__(self, bus: EventBus) -> None:
        self.indicated_airspeed: ConsumerSubject = bus.subscribe_with_precision(PanelEvents.INDICATED_AIRSPEED, 0, 0)
        self.fuel_total_gal: ConsumerSubject = bus.subscribe_with_precision(PanelEvents.FUEL_TOTAL_GAL, 1, 0)
        self.fuel_capacity_gal: ConsumerSubject = bus.subscribe_with_precision(PanelEvents.FUEL_TOTAL_CAPACITY, 1, 1)
        self.flaps_index: ConsumerSubject = bus.subscribe_with_precision(PanelEvents.FLAPS_INDEX, 0, 0)
        self.flaps_percent: ConsumerSubject = bus.subscribe_with_precision(PanelEvents.FLAPS_PERCENT, 0, 0)

    @property
    def subjects(self) -> tuple[ConsumerSubject, ...]:
        return (
            self.indicated_airspeed,
            self.fuel_total_gal,
            self.fuel_capacity_gal,
            self.flaps_index,
            self.flaps_percent,
        )

    @property
    def fuel_fraction(self) -> float:
        capacity = max(1.0, self.fuel_capacity_gal.get())
        return min(1.0, max(0.0, self.fuel_total_gal.get() / capacity))

    @property
    def fuel_color(self) -> str:
        return fuel_color(self.fuel_fraction)

    def readout(self) -> dict[str, float]:
        """Values as currently displayed, keyed by topic."""
        return {subject.topic: subject.get() for subject in self.subjects}

    def detach(self) -> None:
        for subject in self.subjects:
            subject.detach()
