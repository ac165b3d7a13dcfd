"""Cooperative cancellation of generation work."""

from log import get_logger
from utils.exceptions import GenerationCancelledError

logger = get_logger(__name__)


class CancellationToken:
    """Flag shared between a generation loop and whoever may cancel it.

    Cancellation is cooperative: requesting it only sets the flag, the
    owning loop checks it each time it receives the next delta and winds
    down on its own.
    """

    def __init__(self) -> None:
        """Create a token that is not cancelled."""
        self._cancelled = False

    def cancel(self) -> None:
        """Request cancellation; repeated requests are ignored."""
        if not self._cancelled:
            logger.debug("Cancellation requested")
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation was requested."""
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        """Raise GenerationCancelledError when cancellation was requested."""
        if self._cancelled:
            raise GenerationCancelledError("Generation cancelled")
