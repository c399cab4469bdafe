from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Callable, List

logger = logging.getLogger(__name__)


class Screen(ABC):
    """
    A screen's state holder, constructed by its host and torn down with
    `destroy()`. Usable as a context manager so the teardown cannot be skipped.
    """
    name = "screen"

    def __init__(self) -> None:
        self._destroyed = False
        self._teardown: List[Callable[[], None]] = []

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def on_destroy(self, fn: Callable[[], None]) -> None:
        self._teardown.append(fn)

    @abstractmethod
    def _stop_timers(self) -> None: ...

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._stop_timers()
        for fn in reversed(self._teardown):
            fn()
        self._teardown.clear()
        logger.info("[%s] destroyed", self.name)

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.destroy()
