from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from oakwire._internal.providers import UserDependency
from oakwire._internal.type_checks import SupportsClose
from oakwire.exceptions import OakwireShutdownError, format_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ShutdownCoordinator:
    """Close singletons in reverse construction order.

    The deadline is advisory: it is checked before each ``close()`` call and a
    running ``close()`` is never interrupted.
    """

    clock: Callable[[], float] = time.monotonic

    def close_all(
        self,
        closers: Sequence[tuple[UserDependency, SupportsClose]],
        *,
        timeout: float | None = None,
    ) -> None:
        """Close every instance, dependents before their dependencies.

        Args:
            closers: ``(key, instance)`` pairs in construction order.
            timeout: Seconds allowed for the whole pass, or ``None`` to wait
                for every closer.

        Raises:
            OakwireShutdownError: If any ``close()`` raised or the deadline
                expired before every instance was closed.

        """
        deadline = None if timeout is None else self.clock() + timeout
        errors: list[BaseException] = []
        skipped: list[object] = []

        remaining = list(reversed(closers))
        for index, (key, instance) in enumerate(remaining):
            if deadline is not None and self.clock() >= deadline:
                skipped = [pending for _, pending in remaining[index:]]
                msg = f"Shutdown deadline exceeded with {len(skipped)} closer(s) left."
                logger.warning(msg)
                errors.append(TimeoutError(msg))
                break
            try:
                instance.close()
            except Exception as error:
                logger.warning("Closing %s failed: %r", format_key(key), error)
                errors.append(error)
            else:
                logger.debug("Closed %s", format_key(key))

        if errors:
            raise OakwireShutdownError(errors, skipped)


__all__ = ["ShutdownCoordinator"]
