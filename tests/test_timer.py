"""Unit tests for SessionTimer."""

from datetime import date, timedelta

import pytest

from pomobar.core.events import (
    DAILY_GOAL_REACHED,
    SESSION_COMPLETED,
    TIMER_UPDATED,
    EventBus,
)
from pomobar.core.models import SessionType, TimerState
from pomobar.core.scheduler import ScheduledTask, Scheduler
from pomobar.core.settings import Settings
from pomobar.core.timer import TICK_INTERVAL_SECONDS, SessionTimer
from pomobar.persistence.store import PreferenceStore


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

DAY = date(2025, 1, 6)


class _ManualTask(ScheduledTask):
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self):
        return self._cancelled

    def cancel(self):
        self._cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose ticks are fired by the test."""

    def __init__(self):
        self.tasks = []

    def schedule_repeating(self, interval, callback):
        task = _ManualTask(interval, callback)
        self.tasks.append(task)
        return task

    @property
    def active(self):
        return [t for t in self.tasks if not t.cancelled]

    def tick(self, count=1):
        for _ in range(count):
            for task in self.active:
                task.callback(task)


class Clock:
    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


@pytest.fixture
def prefs():
    s = PreferenceStore(":memory:")
    s.init_db()
    yield s
    s.close()


@pytest.fixture
def clock():
    return Clock(DAY)


@pytest.fixture
def settings(prefs, clock):
    return Settings(prefs, today=clock)


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def recorded(events):
    """List of (event name, args) in emission order."""
    log = []
    for name in (TIMER_UPDATED, SESSION_COMPLETED, DAILY_GOAL_REACHED):
        events.subscribe(name, lambda *args, n=name: log.append((n, args)))
    return log


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def timer(settings, events, scheduler):
    return SessionTimer(settings, events, scheduler)


def _names(log):
    return [name for name, _ in log]


# ------------------------------------------------------------------
# Initial state and derived values
# ------------------------------------------------------------------

class TestInitialState:
    def test_starts_idle_on_work(self, timer):
        assert timer.state == TimerState.IDLE
        assert timer.session_type == SessionType.WORK
        assert timer.remaining_seconds == 25 * 60
        assert timer.completed_sessions == 0

    def test_progress_zero_at_start(self, timer):
        assert timer.progress == 0.0

    def test_formatted_time(self, timer):
        assert timer.formatted_time == "25:00"

    def test_duration_for_each_type(self, timer):
        assert timer.duration_for(SessionType.WORK) == 1500
        assert timer.duration_for(SessionType.SHORT_BREAK) == 300
        assert timer.duration_for(SessionType.LONG_BREAK) == 900

    def test_loads_completed_count(self, prefs, clock, events, scheduler):
        settings = Settings(prefs, today=clock)
        settings.completed_today = 3
        timer = SessionTimer(settings, events, scheduler)
        assert timer.completed_sessions == 3

    def test_snapshot_matches_timer(self, timer, settings):
        snap = timer.snapshot()
        assert snap.state == TimerState.IDLE
        assert snap.session_type == SessionType.WORK
        assert snap.remaining_seconds == 1500
        assert snap.duration_seconds == 1500
        assert snap.daily_goal == settings.daily_goal


# ------------------------------------------------------------------
# start / pause / toggle
# ------------------------------------------------------------------

class TestStartPause:
    def test_start_schedules_one_second_ticks(self, timer, scheduler, recorded):
        timer.start()
        assert timer.state == TimerState.RUNNING
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == TICK_INTERVAL_SECONDS
        assert _names(recorded) == [TIMER_UPDATED]

    def test_start_while_running_is_noop(self, timer, scheduler, recorded):
        timer.start()
        timer.start()
        assert len(scheduler.tasks) == 1
        assert _names(recorded) == [TIMER_UPDATED]

    def test_pause_cancels_countdown(self, timer, scheduler):
        timer.start()
        scheduler.tick(10)
        timer.pause()
        assert timer.state == TimerState.PAUSED
        assert timer.remaining_seconds == 1490
        assert scheduler.active == []

    def test_pause_when_idle_is_noop(self, timer, recorded):
        timer.pause()
        assert timer.state == TimerState.IDLE
        assert recorded == []

    def test_resume_keeps_remaining(self, timer, scheduler):
        timer.start()
        scheduler.tick(5)
        timer.pause()
        timer.start()
        assert timer.state == TimerState.RUNNING
        assert timer.remaining_seconds == 1495
        scheduler.tick()
        assert timer.remaining_seconds == 1494

    def test_toggle(self, timer):
        timer.toggle_start_pause()
        assert timer.state == TimerState.RUNNING
        timer.toggle_start_pause()
        assert timer.state == TimerState.PAUSED
        timer.toggle_start_pause()
        assert timer.state == TimerState.RUNNING


# ------------------------------------------------------------------
# Ticking
# ------------------------------------------------------------------

class TestTick:
    def test_each_tick_decrements_and_notifies(self, timer, scheduler, recorded):
        timer.start()
        scheduler.tick(3)
        assert timer.remaining_seconds == 1497
        assert _names(recorded) == [TIMER_UPDATED] * 4

    def test_progress_advances(self, timer, scheduler):
        timer.start()
        scheduler.tick(750)
        assert timer.progress == pytest.approx(0.5)

    def test_last_tick_completes_work_session(self, settings, timer, scheduler, recorded):
        settings.work_duration = 1
        timer.apply_settings()
        timer.start()
        scheduler.tick(59)
        assert timer.state == TimerState.RUNNING
        assert timer.remaining_seconds == 1

        recorded.clear()
        scheduler.tick()

        assert timer.state == TimerState.IDLE
        assert timer.session_type == SessionType.SHORT_BREAK
        assert timer.remaining_seconds == 300
        assert timer.completed_sessions == 1
        assert settings.completed_today == 1
        assert scheduler.active == []
        assert recorded == [
            (SESSION_COMPLETED, (SessionType.WORK,)),
            (TIMER_UPDATED, ()),
        ]

    def test_stale_tick_after_pause_is_ignored(self, timer, scheduler):
        timer.start()
        task = scheduler.tasks[0]
        timer.pause()
        task.callback(task)
        assert timer.remaining_seconds == 1500
        assert timer.state == TimerState.PAUSED

    def test_tick_from_previous_run_is_ignored(self, timer, scheduler):
        timer.start()
        old = scheduler.tasks[0]
        timer.pause()
        timer.start()
        old.callback(old)
        assert timer.remaining_seconds == 1500

    def test_stale_tick_after_skip_does_not_touch_next_session(self, timer, scheduler):
        timer.start()
        task = scheduler.tasks[0]
        timer.skip()
        task.callback(task)
        assert timer.session_type == SessionType.SHORT_BREAK
        assert timer.remaining_seconds == 300


# ------------------------------------------------------------------
# reset / skip
# ------------------------------------------------------------------

class TestResetSkip:
    def test_reset_restores_full_duration(self, timer, scheduler):
        timer.start()
        scheduler.tick(100)
        timer.reset()
        assert timer.state == TimerState.IDLE
        assert timer.remaining_seconds == 1500
        assert timer.session_type == SessionType.WORK
        assert scheduler.active == []

    def test_reset_keeps_completed_count(self, timer):
        timer.skip()
        timer.reset()
        assert timer.completed_sessions == 1
        assert timer.session_type == SessionType.SHORT_BREAK

    def test_skip_work_counts_as_completed(self, timer, recorded):
        timer.skip()
        assert timer.completed_sessions == 1
        assert (SESSION_COMPLETED, (SessionType.WORK,)) in recorded

    def test_skip_break_returns_to_work(self, timer, recorded):
        timer.skip()
        recorded.clear()
        timer.skip()
        assert timer.session_type == SessionType.WORK
        assert timer.completed_sessions == 1
        assert timer.remaining_seconds == 1500
        assert recorded[0] == (SESSION_COMPLETED, (SessionType.SHORT_BREAK,))

    def test_skip_while_running_stops_countdown(self, timer, scheduler):
        timer.start()
        timer.skip()
        assert timer.state == TimerState.IDLE
        assert scheduler.active == []


# ------------------------------------------------------------------
# Session sequencing and daily goal
# ------------------------------------------------------------------

class TestSequencing:
    def test_goal_three_cadence_two(self, settings, timer, recorded):
        settings.daily_goal = 3
        settings.sessions_until_long_break = 2

        timer.skip()
        assert timer.session_type == SessionType.SHORT_BREAK
        timer.skip()
        assert timer.session_type == SessionType.WORK
        timer.skip()
        assert timer.completed_sessions == 2
        assert timer.session_type == SessionType.LONG_BREAK
        assert timer.remaining_seconds == 900
        assert _names(recorded).count(DAILY_GOAL_REACHED) == 0

        timer.skip()
        assert timer.session_type == SessionType.WORK
        timer.skip()
        assert timer.completed_sessions == 3
        assert timer.session_type == SessionType.SHORT_BREAK
        assert _names(recorded).count(DAILY_GOAL_REACHED) == 1

    def test_goal_event_precedes_session_completed(self, settings, timer, recorded):
        settings.daily_goal = 1
        timer.skip()
        assert _names(recorded) == [DAILY_GOAL_REACHED, SESSION_COMPLETED, TIMER_UPDATED]

    def test_goal_event_fires_only_once(self, settings, timer, recorded):
        settings.daily_goal = 1
        timer.skip()
        timer.skip()
        timer.skip()
        assert timer.completed_sessions == 2
        assert _names(recorded).count(DAILY_GOAL_REACHED) == 1

    def test_lowering_goal_below_count_does_not_fire(self, settings, timer, recorded):
        settings.completed_today = 5
        settings.daily_goal = 3
        timer.skip()
        assert timer.completed_sessions == 6
        assert DAILY_GOAL_REACHED not in _names(recorded)

    def test_default_cadence_long_break_after_four(self, timer):
        types = []
        for _ in range(4):
            timer.skip()
            types.append(timer.session_type)
            timer.skip()
        assert types == [
            SessionType.SHORT_BREAK,
            SessionType.SHORT_BREAK,
            SessionType.SHORT_BREAK,
            SessionType.LONG_BREAK,
        ]

    def test_completion_persists_count(self, settings, timer):
        timer.skip()
        timer.skip()
        timer.skip()
        assert settings.completed_today == 2

    def test_snapshot_after_midnight_shows_zero(self, prefs, clock, events, scheduler):
        settings = Settings(prefs, today=clock)
        settings.completed_today = 8
        timer = SessionTimer(settings, events, scheduler)
        assert timer.snapshot().completed_sessions == 8
        assert timer.snapshot().goal_reached

        clock.today = DAY + timedelta(days=1)
        snap = timer.snapshot()
        assert snap.completed_sessions == 0
        assert not snap.goal_reached
        assert timer.completed_sessions == 0

        timer.skip()
        assert timer.snapshot().completed_sessions == 1

    def test_count_rolls_over_on_new_day(self, settings, timer, clock):
        timer.skip()
        timer.skip()
        assert timer.completed_sessions == 1
        clock.today = DAY + timedelta(days=1)
        timer.skip()
        assert timer.completed_sessions == 1
        assert settings.completed_today == 1


# ------------------------------------------------------------------
# set_progress
# ------------------------------------------------------------------

class TestSetProgress:
    def test_half(self, timer):
        timer.set_progress(0.5)
        assert timer.remaining_seconds == 750

    def test_zero_is_full_duration(self, timer):
        timer.set_progress(0.3)
        timer.set_progress(0.0)
        assert timer.remaining_seconds == 1500

    def test_one_leaves_a_second(self, timer):
        timer.set_progress(1.0)
        assert timer.remaining_seconds == 1
        assert timer.state == TimerState.IDLE
        assert timer.session_type == SessionType.WORK

    def test_out_of_range_is_clamped(self, timer):
        timer.set_progress(-2)
        assert timer.remaining_seconds == 1500
        timer.set_progress(7)
        assert timer.remaining_seconds == 1

    def test_rounds_to_nearest_second(self, settings, timer):
        settings.work_duration = 1
        timer.apply_settings()
        timer.set_progress(0.51)
        assert timer.remaining_seconds == 29

    def test_does_not_change_state(self, timer, scheduler):
        timer.start()
        timer.set_progress(0.9)
        assert timer.state == TimerState.RUNNING
        assert len(scheduler.active) == 1

    def test_notifies(self, timer, recorded):
        timer.set_progress(0.25)
        assert _names(recorded) == [TIMER_UPDATED]

    def test_next_tick_completes_after_scrub_to_end(self, timer, scheduler):
        timer.start()
        timer.set_progress(1.0)
        scheduler.tick()
        assert timer.completed_sessions == 1
        assert timer.session_type == SessionType.SHORT_BREAK


# ------------------------------------------------------------------
# apply_settings / reset_day / shutdown
# ------------------------------------------------------------------

class TestApplySettings:
    def test_idle_picks_up_new_duration(self, settings, timer):
        settings.work_duration = 10
        timer.apply_settings()
        assert timer.remaining_seconds == 600

    def test_paused_session_is_left_alone(self, settings, timer, scheduler):
        timer.start()
        scheduler.tick(5)
        timer.pause()
        settings.work_duration = 30
        timer.apply_settings()
        assert timer.remaining_seconds == 1495
        assert timer.state == TimerState.PAUSED

    def test_paused_session_ignores_shorter_duration(self, settings, timer, scheduler, recorded):
        timer.start()
        scheduler.tick(300)
        timer.pause()
        recorded.clear()
        settings.work_duration = 10
        timer.apply_settings()
        assert timer.remaining_seconds == 1200
        assert timer.state == TimerState.PAUSED
        assert recorded == []

    def test_running_session_ignores_shorter_duration(self, settings, timer, scheduler):
        timer.start()
        scheduler.tick(300)
        settings.work_duration = 10
        timer.apply_settings()
        assert timer.remaining_seconds == 1200
        scheduler.tick()
        assert timer.remaining_seconds == 1199

    def test_running_session_is_left_alone(self, settings, timer, scheduler):
        timer.start()
        scheduler.tick(100)
        settings.work_duration = 40
        timer.apply_settings()
        assert timer.remaining_seconds == 1400
        assert timer.state == TimerState.RUNNING

    def test_next_session_uses_new_duration(self, settings, timer, scheduler):
        timer.start()
        settings.short_break_duration = 2
        timer.skip()
        assert timer.remaining_seconds == 120


class TestResetDay:
    def test_zeroes_count_and_store(self, settings, timer, recorded):
        timer.skip()
        timer.skip()
        timer.skip()
        recorded.clear()
        timer.reset_day()
        assert timer.completed_sessions == 0
        assert settings.completed_today == 0
        assert _names(recorded) == [TIMER_UPDATED]

    def test_keeps_session_position(self, timer):
        timer.skip()
        timer.reset_day()
        assert timer.session_type == SessionType.SHORT_BREAK

    def test_goal_can_fire_again_after_reset(self, settings, timer, recorded):
        settings.daily_goal = 1
        timer.skip()
        timer.skip()
        timer.reset_day()
        timer.skip()
        assert _names(recorded).count(DAILY_GOAL_REACHED) == 2


class TestShutdown:
    def test_cancels_countdown_without_state_change(self, timer, scheduler):
        timer.start()
        timer.shutdown()
        assert scheduler.active == []
        assert timer.state == TimerState.RUNNING


# ------------------------------------------------------------------
# Listener isolation
# ------------------------------------------------------------------

class TestListenerFailures:
    def test_failing_listener_does_not_stop_timer(self, timer, events, scheduler):
        calls = []

        def broken():
            raise RuntimeError("boom")

        events.subscribe(TIMER_UPDATED, broken)
        events.subscribe(TIMER_UPDATED, lambda: calls.append(1))

        timer.start()
        scheduler.tick(2)

        assert timer.state == TimerState.RUNNING
        assert timer.remaining_seconds == 1498
        assert len(calls) == 3
