"""One-time diagnostics for recoverable data-shape anomalies.

A Diagnostics instance is a session-scoped collaborator: it remembers the
messages it already emitted and logs each unique message once. It is
passed explicitly to the query evaluator and the pipeline instead of
living in module state.
"""

from __future__ import annotations

import logging
import os

PREFIX = "[collectionkit]"


def _enabled_from_environment() -> bool:
    return os.environ.get("COLLECTIONKIT_DIAGNOSTICS", "1").lower() not in (
        "0",
        "false",
        "no",
        "off",
    )


class Diagnostics:
    """Emit each unique warning message once."""

    def __init__(
        self, logger: logging.Logger | None = None, enabled: bool | None = None
    ):
        """Initialize diagnostics.

        Args:
            logger: Logger receiving the warnings (defaults to this module's)
            enabled: Whether to emit at all; defaults to the
                COLLECTIONKIT_DIAGNOSTICS environment variable
        """
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = _enabled_from_environment() if enabled is None else enabled
        self._emitted: set[str] = set()
        self._order: list[str] = []

    def warn_once(self, message: str) -> None:
        """Log a warning unless the same message was already emitted."""
        if not self.enabled:
            return
        warning = f"{PREFIX} {message}"
        if warning in self._emitted:
            return
        self._emitted.add(warning)
        self._order.append(warning)
        self.logger.warning(warning)

    @property
    def messages(self) -> list[str]:
        """Messages emitted so far, in emission order."""
        return list(self._order)

    def clear(self) -> None:
        """Forget emitted messages so they can be reported again."""
        self._emitted.clear()
        self._order.clear()

    def __len__(self) -> int:
        return len(self._order)
