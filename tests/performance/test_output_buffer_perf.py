from __future__ import annotations

import time

import pytest

from termdeck.terminal import OutputBuffer


@pytest.mark.performance
def test_append_throughput_stays_within_budget() -> None:
    buffer = OutputBuffer(capacity=1000)

    started = time.perf_counter()
    for index in range(50_000):
        buffer.append(f"line-{index}")
    elapsed = time.perf_counter() - started

    assert len(buffer) == 1000
    assert buffer.texts()[-1] == "line-49999"
    assert elapsed < 2.0, f"append loop exceeded budget: {elapsed:.3f}s"


@pytest.mark.performance
def test_snapshot_loop_stays_within_budget() -> None:
    buffer = OutputBuffer(capacity=1000)
    for index in range(1000):
        buffer.append(f"line-{index}")

    started = time.perf_counter()
    for _ in range(500):
        buffer.snapshot()
    elapsed = time.perf_counter() - started

    assert elapsed < 2.0, f"snapshot loop exceeded budget: {elapsed:.3f}s"
