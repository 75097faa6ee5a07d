"""Topic-keyed event bus with precision-gated consumer subjects.

Publishers push raw numbers per topic. Each :class:`ConsumerSubject` is an
independent filter bound to one topic and one rounding precision: it only
changes (and only notifies its handlers) when the rounded value differs
from the last one it emitted. An airspeed jittering by 0.001 kt therefore
never reaches a gauge subscribed at zero decimal places.
"""

from __future__ import annotations

import contextlib
import logging
import math
from collections.abc import Callable

_logger = logging.getLogger(__name__)

Handler = Callable[[float], None]


def round_to_precision(value: float, places: int) -> float:
    """Round half-up to *places* decimal places (negative rounds to tens, hundreds...)."""
    factor = 10.0**places
    return math.floor(value * factor + 0.5) / factor


class ConsumerSubject:
    """A subscriber's filtered view of one topic.

    Created by :meth:`EventBus.subscribe`; read synchronously with
    :meth:`get` at render time, or observed with :meth:`sub`.
    """

    def __init__(
        self,
        bus: EventBus,
        topic: str,
        precision: int,
        initial_value: float,
        emit_on_attach: bool,
    ) -> None:
        self._bus: EventBus | None = bus
        self._topic = topic
        self._precision = precision
        self._value = initial_value
        self._last_emitted = initial_value
        self._pending_first = emit_on_attach
        self._handlers: list[Handler] = []

    def __repr__(self) -> str:
        return f"ConsumerSubject(topic={self._topic!r}, precision={self._precision}, value={self._value!r})"

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def last_emitted(self) -> float:
        return self._last_emitted

    @property
    def is_attached(self) -> bool:
        return self._bus is not None

    def get(self) -> float:
        """Current visible value."""
        return self._value

    def sub(self, handler: Handler, initial_notify: bool = False) -> Callable[[], None]:
        """Call *handler* with every emitted value; returns a callable that removes it."""
        self._handlers.append(handler)
        if initial_notify:
            self._notify_one(handler, self._value)

        def _unsub() -> None:
            with contextlib.suppress(ValueError):
                self._handlers.remove(handler)

        return _unsub

    def detach(self) -> None:
        """Stop receiving publishes. Idempotent."""
        bus = self._bus
        self._bus = None
        if bus is not None:
            bus.unsubscribe(self)
        self._handlers.clear()

    def _offer(self, raw: float, *, force: bool = False) -> bool:
        """Apply the rounding/emit check for one published value."""
        rounded = round_to_precision(raw, self._precision)
        first = self._pending_first
        self._pending_first = False
        if not force and not first and rounded == self._last_emitted:
            return False
        self._value = rounded
        self._last_emitted = rounded
        for handler in list(self._handlers):
            self._notify_one(handler, rounded)
        return True

    def _notify_one(self, handler: Handler, value: float) -> None:
        try:
            handler(value)
        except Exception:
            _logger.exception("ConsumerSubject handler error [%s]", self._topic)


class EventBus:
    """Per-topic publish/subscribe for numeric signals.

    Not thread-safe: publish and subscribe from the event loop that drives
    the render clock.
    """

    def __init__(self) -> None:
        self._latest: dict[str, float] = {}
        self._subjects: dict[str, list[ConsumerSubject]] = {}

    def publish(self, topic: str, value: float, change_detection_only: bool = True) -> int:
        """Record *value* for *topic* and offer it to every attached subject.

        With ``change_detection_only=False`` every subject re-emits even when
        its rounded value is unchanged. Returns how many subjects emitted;
        publishing to a topic without subscribers is a no-op returning 0.
        """
        raw = float(value)
        self._latest[topic] = raw
        emitted = 0
        for subject in list(self._subjects.get(topic, ())):
            if subject._offer(raw, force=not change_detection_only):  # noqa: SLF001
                emitted += 1
        return emitted

    def subscribe(
        self,
        topic: str,
        precision: int = 0,
        initial_value: float = 0.0,
        emit_on_attach: bool = True,
    ) -> ConsumerSubject:
        """Attach a new subject to *topic*.

        When *emit_on_attach* is set and the topic already has a value, the
        subject emits it (rounded) immediately.
        """
        subject = ConsumerSubject(self, topic, precision, initial_value, emit_on_attach)
        self._subjects.setdefault(topic, []).append(subject)
        if emit_on_attach and topic in self._latest:
            subject._offer(self._latest[topic])  # noqa: SLF001
        return subject

    def subscribe_with_precision(self, topic: str, decimal_places: int, default_value: float = 0.0) -> ConsumerSubject:
        """Subscription surface for gauges: emit-on-attach at *decimal_places*."""
        return self.subscribe(topic, decimal_places, default_value, emit_on_attach=True)

    def unsubscribe(self, subject: ConsumerSubject) -> None:
        """Remove *subject* from its topic. Unknown subjects are ignored."""
        subjects = self._subjects.get(subject.topic)
        if not subjects:
            return
        self._subjects[subject.topic] = [s for s in subjects if s is not subject]
        if not self._subjects[subject.topic]:
            del self._subjects[subject.topic]
        if subject.is_attached:
            subject.detach()

    def latest(self, topic: str) -> float | None:
        """Most recent raw value published to *topic*."""
        return self._latest.get(topic)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subjects.get(topic, ()))
