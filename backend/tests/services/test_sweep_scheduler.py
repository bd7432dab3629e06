import asyncio
from unittest.mock import Mock, patch

from roombook.services.sweep_scheduler import SweepScheduler


def test_run_once_uses_fresh_session_and_closes_it():
    session = Mock()
    with patch("roombook.services.sweep_scheduler.PassedReservationSweeper") as sweeper_cls:
        sweeper_cls.return_value.sweep.return_value = 3
        scheduler = SweepScheduler(lambda: session, interval_seconds=60)

        assert scheduler.run_once() == 3

    sweeper_cls.assert_called_once_with(session)
    session.close.assert_called_once()


def test_start_and_stop_are_idempotent():
    async def scenario():
        scheduler = SweepScheduler(Mock(), interval_seconds=0.01)
        scheduler.run_once = Mock(return_value=0)

        await scheduler.start()
        first_task = scheduler._task
        await scheduler.start()
        assert scheduler._task is first_task
        assert scheduler.running

        await asyncio.sleep(0.2)
        await scheduler.stop()
        assert not scheduler.running
        assert scheduler._task is None and scheduler._stop_event is None
        await scheduler.stop()
        return scheduler.run_once.call_count

    assert asyncio.run(scenario()) >= 1


def test_loop_survives_sweep_errors():
    async def scenario():
        outcomes = iter([RuntimeError("db down"), 2])

        def run_once():
            outcome = next(outcomes, 0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        scheduler = SweepScheduler(Mock(), interval_seconds=0.01)
        scheduler.run_once = Mock(side_effect=run_once)

        await scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()
        return scheduler.run_once.call_count

    assert asyncio.run(scenario()) >= 2


def test_stop_before_start_is_a_no_op():
    asyncio.run(SweepScheduler(Mock(), interval_seconds=1).stop())


def test_stop_after_loop_already_finished():
    async def scenario():
        scheduler = SweepScheduler(Mock(), interval_seconds=1)
        scheduler.run_once = Mock(return_value=0)
        await scheduler.start()
        scheduler._task.cancel()
        await asyncio.wait({scheduler._task})
        assert not scheduler.running

        await scheduler.stop()

    asyncio.run(scenario())
