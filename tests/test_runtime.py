import pytest

from signature_extractor.errors import EnvironmentNotReady, SignatureExtractionError
from signature_extractor.runtime import VisionRuntime, opencv_ready


def test_opencv_is_ready_once_imported():
    assert opencv_ready()
    VisionRuntime().wait_until_ready(timeout_ms=10)


def test_wait_times_out_with_distinct_error():
    runtime = VisionRuntime(lambda: False, poll_interval_s=0.001)
    with pytest.raises(EnvironmentNotReady) as exc:
        runtime.wait_until_ready(timeout_ms=15)
    assert exc.value.timeout_ms == 15
    assert isinstance(exc.value, SignatureExtractionError)


def test_wait_returns_when_probe_flips():
    state = {"n": 0}

    def probe():
        state["n"] += 1
        return state["n"] > 2

    VisionRuntime(probe, poll_interval_s=0.001).wait_until_ready(timeout_ms=5000)
    assert state["n"] == 3
