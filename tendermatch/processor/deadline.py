import threading
from collections.abc import Callable
from typing import TypeVar

from tendermatch.processor.exceptions import AdapterTimeoutError

T = TypeVar("T")


def call_with_deadline(fn: Callable[[], T], timeout_seconds: float, label: str) -> T:
    """Run an adapter call on a daemon thread and wait at most timeout_seconds.

    The call's own exceptions are re-raised in the caller. When the deadline
    passes, the thread is abandoned and its eventual result is discarded.

    Raises:
        AdapterTimeoutError: if the call does not finish in time.
    """
    outcome: dict[str, object] = {}

    def run() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as exc:  # noqa: BLE001
            outcome["error"] = exc

    thread = threading.Thread(target=run, name=f"adapter-{label}", daemon=True)
    thread.start()
    thread.join(timeout_seconds)

    if thread.is_alive():
        raise AdapterTimeoutError(f"{label} did not finish within {timeout_seconds} seconds")
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]
