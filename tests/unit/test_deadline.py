import threading

import pytest

from tendermatch.processor.deadline import call_with_deadline
from tendermatch.processor.exceptions import AdapterTimeoutError


class TestCallWithDeadline:
    def test_returns_result(self) -> None:
        assert call_with_deadline(lambda: 42, 1.0, "ocr") == 42

    def test_reraises_call_error(self) -> None:
        def fail() -> None:
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            call_with_deadline(fail, 1.0, "ocr")

    def test_raises_timeout_when_call_overruns(self) -> None:
        release = threading.Event()
        try:
            with pytest.raises(AdapterTimeoutError, match="analysis did not finish within 0.05"):
                call_with_deadline(lambda: release.wait(5), 0.05, "analysis")
        finally:
            release.set()

    def test_runs_on_separate_thread(self) -> None:
        caller = threading.get_ident()

        worker = call_with_deadline(threading.get_ident, 1.0, "ocr")

        assert worker != caller
