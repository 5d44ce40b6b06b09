"""
Cooperative cancellation for long scans.
"""

import threading


class CancellationToken:
    """
    Thread-safe flag shared between a caller and a running scan.

    The scanner checks the token between traversal steps; once cancelled the
    scan raises ScanCancelledError instead of returning a partial result.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
