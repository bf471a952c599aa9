"""User-facing notification contract."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

_LOG = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    def notify(self, message: str, *, error: bool = False) -> None: ...  # pragma: no cover


class LoggingNotifier(Notifier):
    """Fallback used when no UI is attached."""

    def notify(self, message: str, *, error: bool = False) -> None:
        if error:
            _LOG.error("%s", message)
        else:
            _LOG.info("%s", message)
