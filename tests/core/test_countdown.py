# tests/core/test_countdown.py

import asyncio

import pytest
from unittest.mock import Mock

from medintake.core.countdown import EtaCountdown
from medintake.models.results import DispatchResult


def make_result(eta: int) -> DispatchResult:
    return DispatchResult(
        responder_id="AMB001",
        driver_name="Dr. Sarah Johnson",
        vehicle_number="EMT-2024-001",
        eta_minutes=eta,
        initial_eta_minutes=eta,
        responder_latitude=40.71,
        responder_longitude=-74.0,
    )


@pytest.mark.unit
class TestEtaTicks:

    @pytest.mark.parametrize("initial, ticks", [(3, 1), (3, 3), (3, 7), (0, 2), (12, 5)])
    def test_eta_after_n_ticks(self, initial, ticks):
        result = make_result(initial)
        countdown = EtaCountdown(result)

        for _ in range(ticks):
            countdown.tick()

        assert result.eta_minutes == max(0, initial - ticks)

    def test_no_tick_at_zero(self):
        on_tick = Mock()
        countdown = EtaCountdown(make_result(1), on_tick=on_tick)

        assert countdown.tick() is True
        assert countdown.tick() is False
        assert countdown.ticks == 1
        on_tick.assert_called_once()

    def test_cancelled_countdown_stops_ticking(self):
        result = make_result(10)
        countdown = EtaCountdown(result)
        countdown.tick()

        countdown.cancel()
        countdown.cancel()

        assert countdown.tick() is False
        assert result.eta_minutes == 9
        assert countdown.cancelled

    def test_failing_callback_does_not_stop_countdown(self):
        result = make_result(2)
        countdown = EtaCountdown(result, on_tick=Mock(side_effect=RuntimeError("sink down")))

        assert countdown.tick() is True
        assert result.eta_minutes == 1


@pytest.mark.unit
class TestEtaCountdownTask:

    @pytest.mark.asyncio
    async def test_runs_down_to_zero(self, fast_sleep):
        result = make_result(4)
        seen = []
        countdown = EtaCountdown(result, on_tick=lambda r: seen.append(r.eta_minutes), sleep=fast_sleep)

        countdown.start()
        await countdown.wait()

        assert result.eta_minutes == 0
        assert seen == [3, 2, 1, 0]
        assert countdown.finished
        assert not countdown.running

    @pytest.mark.asyncio
    async def test_cancel_while_running(self):
        result = make_result(15)
        countdown = EtaCountdown(result, interval_seconds=60.0)

        countdown.start()
        await asyncio.sleep(0)
        assert countdown.running

        countdown.cancel()
        await countdown.wait()

        assert not countdown.running
        assert result.eta_minutes == 15

    @pytest.mark.asyncio
    async def test_start_is_noop_when_already_arrived(self):
        countdown = EtaCountdown(make_result(0))

        countdown.start()

        assert not countdown.running
        await countdown.wait()

    @pytest.mark.asyncio
    async def test_start_after_cancel_is_noop(self, fast_sleep):
        result = make_result(3)
        countdown = EtaCountdown(result, sleep=fast_sleep)
        countdown.cancel()

        countdown.start()
        await countdown.wait()

        assert result.eta_minutes == 3
