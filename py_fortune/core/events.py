"""Sweep events and the event queue."""

import heapq
import itertools
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, List, Optional, Tuple

from .geometry import Coordinate

if TYPE_CHECKING:
    from .beach_line import BeachNode
    from .dcel import Site


class EventKind(IntEnum):
    """Event discriminator.

    The numeric value is part of the queue key: at the same point, circle
    events are handled before site events.
    """
    CIRCLE = 0
    SITE = 1


@dataclass(eq=False)
class Event:
    """A site or circle event.

    Site events carry the input ``site``. Circle events carry the circle
    ``center`` (the future Voronoi vertex) and the ``arc`` that vanishes.
    ``coordinate`` is where the sweepline triggers the event.
    """
    kind: EventKind
    coordinate: Coordinate
    site: Optional["Site"] = None
    center: Optional[Coordinate] = None
    arc: Optional["BeachNode"] = None
    cancelled: bool = field(default=False, repr=False)
    queued: bool = field(default=False, repr=False)

    @classmethod
    def site_event(cls, site: "Site") -> "Event":
        return cls(EventKind.SITE, site.coordinate, site=site)

    @classmethod
    def circle_event(cls, event_point: Coordinate, center: Coordinate,
                     arc: "BeachNode") -> "Event":
        return cls(EventKind.CIRCLE, event_point, center=center, arc=arc)


class EventQueue:
    """
    Min-priority queue of events keyed by sweep position.

    Keys are (y, x, kind, sequence): y first, then explicit deterministic
    tie-breaks. Removal is lazy: a removed event stays in the heap flagged as
    cancelled and is skipped when it reaches the top.
    """

    def __init__(self, events: Optional[List[Event]] = None):
        self._counter = itertools.count()
        self._heap: List[Tuple[float, float, int, int, Event]] = []
        self._live = 0
        for event in events or []:
            event.queued = True
            self._heap.append(self._entry(event))
            self._live += 1
        heapq.heapify(self._heap)

    def _entry(self, event: Event) -> Tuple[float, float, int, int, Event]:
        return (event.coordinate.y, event.coordinate.x, int(event.kind),
                next(self._counter), event)

    def __len__(self) -> int:
        return self._live

    @property
    def is_empty(self) -> bool:
        return self._live == 0

    def enqueue(self, event: Event) -> None:
        event.cancelled = False
        event.queued = True
        heapq.heappush(self._heap, self._entry(event))
        self._live += 1

    def dequeue(self) -> Optional[Event]:
        """Pop the pending event with the smallest key, or None when empty."""
        while self._heap:
            event = heapq.heappop(self._heap)[-1]
            event.queued = False
            if not event.cancelled:
                self._live -= 1
                return event
        return None

    def peek(self) -> Optional[Event]:
        while self._heap and self._heap[0][-1].cancelled:
            heapq.heappop(self._heap)[-1].queued = False
        return self._heap[0][-1] if self._heap else None

    def remove(self, event: Event) -> Optional[Event]:
        """
        Invalidate a pending event.

        Args:
            event: The exact event instance to remove

        Returns:
            The event if it was pending, None otherwise
        """
        if event.cancelled or not event.queued:
            return None
        event.cancelled = True
        self._live -= 1
        return event
