"""Unit tests for ElapsedTimer."""

import asyncio

import pytest

from omirecorder.services.elapsed_timer import ElapsedTimer


@pytest.mark.unit
class TestElapsedTimer:
    """Test cases for ElapsedTimer class."""

    def test_initialization(self):
        timer = ElapsedTimer()

        assert timer.interval == 1.0
        assert timer.elapsed_seconds == 0
        assert timer.is_running is False

    def test_start_requires_running_loop(self):
        timer = ElapsedTimer()

        with pytest.raises(RuntimeError):
            timer.start()

    def test_tick_ignored_when_stopped(self):
        ticks = []
        timer = ElapsedTimer(on_tick=ticks.append)

        timer.tick()

        assert timer.elapsed_seconds == 0
        assert ticks == []

    @pytest.mark.asyncio
    async def test_manual_ticks_and_stop(self):
        ticks = []
        timer = ElapsedTimer(interval=60.0, on_tick=ticks.append)

        timer.start()
        for _ in range(3):
            timer.tick()

        assert timer.elapsed_seconds == 3
        assert ticks == [1, 2, 3]

        timer.stop()
        assert timer.elapsed_seconds == 0
        assert timer.is_running is False

    @pytest.mark.asyncio
    async def test_start_resets_count(self):
        timer = ElapsedTimer(interval=60.0)
        timer.start()
        timer.tick()
        timer.tick()

        timer.start()

        assert timer.elapsed_seconds == 0
        assert timer.is_running is True
        timer.stop()

    @pytest.mark.asyncio
    async def test_ticks_on_its_own(self):
        """The background task advances roughly once per interval."""
        timer = ElapsedTimer(interval=0.02)

        timer.start()
        await asyncio.sleep(0.11)
        elapsed = timer.elapsed_seconds
        timer.stop()

        assert 2 <= elapsed <= 7
        assert timer.elapsed_seconds == 0

    @pytest.mark.asyncio
    async def test_stop_cancels_background_task(self):
        timer = ElapsedTimer(interval=0.01)
        timer.start()
        timer.stop()

        await asyncio.sleep(0.05)

        assert timer.elapsed_seconds == 0
