import pytest

from core.settings import GUARD
from services.focus_guard import TAB_SWITCH, WINDOW_BLUR, FocusGuard


@pytest.fixture
def guard_env(clock, tickers):
    reports = []
    returns = []
    titles = []
    guard = FocusGuard(
        on_distraction=lambda kind, seconds: reports.append((kind, seconds)),
        on_return=lambda: returns.append(True),
        title_sink=titles.append,
        original_title="FocusFlow",
        clock=clock,
        ticker_factory=tickers,
    )
    return guard, reports, returns, titles


def test_inactive_guard_ignores_events(guard_env, clock):
    guard, reports, returns, _ = guard_env

    guard.on_visibility_change(True)
    clock.advance(10)
    guard.on_visibility_change(False)
    guard.on_window_blur()
    guard.on_window_focus()

    assert reports == []
    assert returns == []
    assert guard.state.total_distractions == 0


def test_hidden_page_is_a_tab_switch(guard_env, clock):
    guard, reports, returns, _ = guard_env
    guard.set_active(True)

    guard.on_visibility_change(True)
    assert guard.state.is_tab_switched is True
    assert guard.state.total_distractions == 1
    clock.advance(10)
    guard.on_visibility_change(False)

    assert reports == [(TAB_SWITCH, 10)]
    assert returns == [True]
    assert guard.state.total_distractions == 1
    assert guard.state.total_distraction_seconds == 10
    assert guard.state.is_distracted is False


def test_duration_rounds_half_up(guard_env, clock):
    guard, reports, _, _ = guard_env
    guard.set_active(True)

    guard.on_visibility_change(True)
    clock.advance(2.5)
    guard.on_visibility_change(False)

    assert reports == [(TAB_SWITCH, 3)]


def test_window_blur_episode(guard_env, clock):
    guard, reports, returns, _ = guard_env
    guard.set_active(True)

    guard.on_window_blur()
    clock.advance(4)
    guard.on_window_focus()

    assert reports == [(WINDOW_BLUR, 4)]
    assert returns == [True]


def test_blur_then_hide_counts_once_as_tab_switch(guard_env, clock):
    guard, reports, _, _ = guard_env
    guard.set_active(True)

    guard.on_window_blur()
    clock.advance(2)
    guard.on_visibility_change(True)
    clock.advance(5)
    # focus while still hidden does not end the episode
    guard.on_window_focus()
    assert reports == []
    guard.on_visibility_change(False)

    assert reports == [(TAB_SWITCH, 7)]
    assert guard.state.total_distractions == 1


def test_hide_then_blur_is_one_episode(guard_env, clock):
    guard, reports, _, _ = guard_env
    guard.set_active(True)

    guard.on_visibility_change(True)
    guard.on_window_blur()
    clock.advance(3)
    guard.on_visibility_change(False)

    assert reports == [(TAB_SWITCH, 3)]
    assert guard.state.total_distractions == 1


def test_counters_accumulate_across_episodes(guard_env, clock):
    guard, _, _, _ = guard_env
    guard.set_active(True)

    for seconds in (3, 4):
        guard.on_visibility_change(True)
        clock.advance(seconds)
        guard.on_visibility_change(False)

    guard.set_active(False)
    guard.set_active(True)

    assert guard.state.total_distractions == 2
    assert guard.state.total_distraction_seconds == 7


def test_deactivating_mid_episode_reports_without_return(guard_env, clock):
    guard, reports, returns, _ = guard_env
    guard.set_active(True)

    guard.on_visibility_change(True)
    clock.advance(6)
    guard.set_active(False)

    assert reports == [(TAB_SWITCH, 6)]
    assert returns == []
    assert guard.state.is_distracted is False

    guard.on_visibility_change(False)
    assert len(reports) == 1


def test_title_blinks_while_away(guard_env, tickers):
    guard, _, _, titles = guard_env
    guard.set_active(True)
    assert titles[-1] == GUARD.focus_title

    guard.on_visibility_change(True)
    assert len(tickers.active) == 1
    assert tickers.active[0].interval == GUARD.blink_interval_sec

    tickers.fire()
    assert guard.title == GUARD.alert_title
    tickers.fire()
    assert guard.title == GUARD.focus_title

    guard.on_visibility_change(False)
    assert tickers.active == []
    assert guard.title == GUARD.focus_title


def test_original_title_restored(guard_env, tickers):
    guard, _, _, titles = guard_env
    guard.set_active(True)
    guard.on_visibility_change(True)

    guard.set_active(False)
    assert tickers.active == []
    assert titles[-1] == "FocusFlow"

    guard.set_active(True)
    guard.dispose()
    assert guard.title == "FocusFlow"


def test_before_unload_prompt_only_when_active(guard_env):
    guard, _, _, _ = guard_env
    assert guard.before_unload() is None

    guard.set_active(True)
    assert guard.before_unload() == GUARD.leave_prompt


def test_state_objects_are_replaced_not_mutated(guard_env, clock):
    guard, _, _, _ = guard_env
    before = guard.state
    guard.set_active(True)
    after = guard.state

    assert before is not after
    assert before.is_active is False
    with pytest.raises(Exception):
        after.is_active = False


def test_subscribers_see_each_transition(guard_env, clock):
    guard, _, _, _ = guard_env
    states = []
    guard.subscribe(states.append)

    guard.set_active(True)
    guard.on_window_blur()
    clock.advance(1)
    guard.on_window_focus()

    # focus regained, then the episode closes
    assert [s.is_distracted for s in states] == [False, True, True, False]
    assert [s.is_window_focused for s in states] == [True, False, True, True]
    assert states[-1].total_distraction_seconds == 1
