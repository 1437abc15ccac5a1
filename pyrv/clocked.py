from abc import ABC, abstractmethod


class Clocked(ABC):
    """Base class for all clocked elements.

    Methods `_prepare_next_val()`, `_tick()`, and `_reset()` must be
    implemented by any class inheriting.
    """
    @abstractmethod
    def _prepare_next_val(self):
        """Saves current input(s)"""

    @abstractmethod
    def _tick(self):
        """Tick function of individual clocked element."""

    @abstractmethod
    def _reset(self):
        """Reset function of individual clocked element."""


class Clock:
    """This class represents the clock of one core.

    Every core owns its own clock, so several cores can be simulated side by
    side. Clocked elements are:
    - Registers (register file, PC)
    - Memories
    """

    def __init__(self):
        self._elems: list[Clocked] = []

    def add(self, obj: Clocked):
        """Adds a clocked element to this clock.

        Args:
            obj: The clocked element (register or memory).
        """
        if not isinstance(obj, Clocked):
            raise TypeError(f"{obj} is not a Clocked element!")
        self._elems.append(obj)

    def tick(self):
        """Performs a clock tick (rising edge).

        First, saves the next value of every element. Then, applies the tick
        to all elements. No element sees another element's new value before
        the tick is complete.
        """
        for e in self._elems:
            e._prepare_next_val()
        for e in self._elems:
            e._tick()

    def reset(self):
        """Resets all clocked elements."""
        for e in self._elems:
            e._reset()
