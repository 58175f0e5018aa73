"""
StepMachine transitions, timers and end-to-end walkthroughs
"""

import itertools
from datetime import timedelta

import pytest

from story_system import (
    ALLOWED_TRANSITIONS,
    CardPhase,
    CountdownGate,
    Step,
    StepMachine,
    can_transition,
)

from conftest import CARD_ANSWERS, FINAL_ANSWER, NOW, make_config


class FakeNow:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def go_to_carousel(machine, advance, name="Alex"):
    assert machine.click()
    assert machine.click()
    assert machine.submit_name(name)
    advance(1000)
    assert machine.step is Step.CAROUSEL


def solve_card(machine, advance, card_id):
    assert machine.open_card(card_id)
    advance(1200)
    result = machine.submit_card_answer(CARD_ANSWERS[card_id])
    assert result is not None and result.accepted
    advance(1200)


def solve_all_cards(machine, advance):
    for card_id in machine.config.card_ids:
        solve_card(machine, advance, card_id)


def test_edge_set_is_a_single_chain():
    chain = [Step.HOME, Step.START, Step.NAME, Step.CAROUSEL, Step.LIGHT_1,
             Step.LIGHT_2, Step.LIGHT_3, Step.LIGHT_4, Step.END]
    expected = set(zip(chain, chain[1:]))
    for source, target in itertools.product(Step, Step):
        assert can_transition(source, target) == ((source, target) in expected)
    assert ALLOWED_TRANSITIONS[Step.END] == frozenset()


def test_initial_state(machine):
    snapshot = machine.snapshot()
    assert snapshot.step is Step.HOME
    assert snapshot.card_phase is CardPhase.CLOSED
    assert snapshot.solved_card_ids == ()
    assert snapshot.display_name == ""
    assert not snapshot.render_game_layer


def test_scenario_a_countdown_past_to_carousel(config, scheduler, logger, advance):
    config.test_mode = False
    countdown = CountdownGate(NOW - timedelta(minutes=5), now=FakeNow(NOW))
    machine = StepMachine(config, scheduler, logger, countdown=countdown)

    assert machine.snapshot().countdown_unlocked
    assert machine.click()
    assert machine.step is Step.START
    assert machine.click()
    assert machine.step is Step.NAME

    assert machine.submit_name("  Alex ")
    assert machine.name_fading
    assert machine.profile.display_name == "Alex"
    advance(999)
    assert machine.step is Step.NAME
    advance(1)
    assert machine.step is Step.CAROUSEL
    assert not machine.name_fading
    assert machine.profile.display_name == "Alex"


def test_locked_home_ignores_click_until_countdown_ticks_open(config, scheduler, logger, advance):
    config.test_mode = False
    now = FakeNow(NOW)
    countdown = CountdownGate(NOW + timedelta(seconds=2), now=now)
    machine = StepMachine(config, scheduler, logger, countdown=countdown)

    assert not machine.click()
    assert machine.step is Step.HOME
    assert machine.snapshot().countdown_text == "0d 00h 00m 02s"

    now.now = NOW + timedelta(seconds=1)
    advance(1000)
    assert machine.snapshot().countdown_text == "0d 00h 00m 01s"
    assert not machine.click()

    now.now = NOW + timedelta(seconds=2)
    advance(1000)
    assert machine.countdown.unlocked
    assert scheduler.pending_count == 0  # ticking stopped
    assert machine.click()
    assert machine.step is Step.START


def test_name_keeps_case_and_inner_spaces(machine, advance):
    machine.click()
    machine.click()
    assert machine.submit_name("  Mary  Ann ")
    assert machine.profile.display_name == "Mary  Ann"


def test_empty_name_is_ignored(machine):
    machine.click()
    machine.click()
    assert not machine.submit_name("   ")
    assert machine.step is Step.NAME
    assert not machine.name_fading
    assert machine.step_timer_pending is False


def test_second_name_during_fade_is_dropped(machine, advance):
    machine.click()
    machine.click()
    machine.submit_name("Alex")
    advance(500)
    assert not machine.submit_name("Sam")
    assert machine.profile.display_name == "Alex"
    advance(500)
    assert machine.step is Step.CAROUSEL


def test_scenario_b_wrong_then_right_answer(machine, advance):
    go_to_carousel(machine, advance)

    assert machine.open_card(1)
    advance(1200)

    result = machine.submit_card_answer("ash")
    assert not result.accepted
    snapshot = machine.snapshot()
    assert snapshot.error_pulse
    assert snapshot.card_phase is CardPhase.FLIPPED
    assert snapshot.active_card_id == 1

    result = machine.submit_card_answer(" LANTERN ")
    assert result.accepted
    advance(1200)
    snapshot = machine.snapshot()
    assert snapshot.active_card_id is None
    assert 1 in snapshot.solved_card_ids
    assert machine.step is Step.CAROUSEL


def test_answer_taken_while_flip_still_locked(machine, advance):
    go_to_carousel(machine, advance)
    machine.open_card(1)
    advance(700)
    assert machine.snapshot().animation_locked

    result = machine.submit_card_answer("wrong")
    assert result is not None and not result.accepted
    assert machine.snapshot().error_pulse

    assert machine.submit_card_answer(CARD_ANSWERS[1]).accepted
    advance(500 + 1200)
    assert machine.snapshot().solved_card_ids == (1,)


def test_pulse_clears_after_500ms(machine, advance):
    go_to_carousel(machine, advance)
    machine.open_card(1)
    advance(1200)
    machine.submit_card_answer("wrong")
    advance(500)
    assert not machine.snapshot().error_pulse


def test_scenario_c_all_cards_to_end(machine, advance):
    go_to_carousel(machine, advance)
    solve_all_cards(machine, advance)

    assert machine.profile.solved_count == machine.config.card_count
    assert machine.step is Step.CAROUSEL
    advance(799)
    assert machine.step is Step.CAROUSEL
    advance(1)
    assert machine.step is Step.LIGHT_1
    assert machine.profile.solved_count == 9

    advance(2499)
    assert machine.step is Step.LIGHT_1
    advance(1)
    assert machine.step is Step.LIGHT_2
    advance(1200)
    assert machine.step is Step.LIGHT_3

    # LIGHT_3 waits for the answer, however long it takes
    advance(60000)
    assert machine.step is Step.LIGHT_3

    assert not machine.submit_final_answer("4095").accepted
    assert machine.snapshot().error_pulse
    assert machine.step is Step.LIGHT_3

    assert machine.submit_final_answer(f" {FINAL_ANSWER} ").accepted
    assert machine.step is Step.LIGHT_4
    assert machine.profile.final_solved

    advance(1200)
    assert machine.step is Step.END
    assert machine.snapshot().display_name == "Alex"

    advance(100000)
    assert machine.step is Step.END


def test_partial_solve_stays_in_carousel(machine, advance):
    go_to_carousel(machine, advance)
    for card_id in machine.config.card_ids[:-1]:
        solve_card(machine, advance, card_id)
    advance(10000)
    assert machine.step is Step.CAROUSEL


def test_unsolved_close_returns_to_carousel_without_solving(machine, advance):
    go_to_carousel(machine, advance)
    machine.open_card(2)
    advance(1200)
    assert machine.close_card()
    advance(1200)
    assert machine.snapshot().solved_card_ids == ()
    assert machine.open_card(2)


def test_solved_card_reopen_is_noop(machine, advance):
    go_to_carousel(machine, advance)
    solve_card(machine, advance, 3)
    before = machine.snapshot()
    assert not machine.open_card(3)
    assert machine.snapshot() == before


def test_rapid_double_open_keeps_one_card(machine, advance):
    go_to_carousel(machine, advance)
    assert machine.open_card(1)
    assert not machine.open_card(2)
    advance(1200)
    assert machine.snapshot().active_card_id == 1


def test_double_submit_fires_one_close(machine, advance):
    go_to_carousel(machine, advance)
    machine.open_card(1)
    advance(1200)
    assert machine.submit_card_answer("lantern").accepted
    assert machine.submit_card_answer("lantern") is None
    advance(1200)
    assert machine.profile.solved_card_ids == (1,)


def test_paging_in_carousel(machine, advance):
    go_to_carousel(machine, advance)
    snapshot = machine.snapshot()
    assert snapshot.visible_card_ids == (1, 2, 3, 4)
    assert not snapshot.can_prev and snapshot.can_next
    assert not machine.prev_page()

    assert machine.next_page()
    assert machine.snapshot().visible_card_ids == (4, 5, 6, 7)
    assert machine.next_page()
    assert machine.snapshot().visible_card_ids == (6, 7, 8, 9)
    assert not machine.next_page()

    machine.open_card(8)
    assert not machine.prev_page()


def test_intents_outside_their_step_are_dropped(machine, advance):
    assert not machine.open_card(1)
    assert not machine.next_page()
    assert machine.submit_card_answer("lantern") is None
    assert machine.submit_final_answer(FINAL_ANSWER) is None
    assert not machine.submit_name("Alex")
    assert machine.step is Step.HOME

    go_to_carousel(machine, advance)
    assert not machine.click()
    assert machine.step is Step.CAROUSEL


def test_step_effects_rerun_does_not_duplicate_timer(machine, advance, scheduler):
    go_to_carousel(machine, advance)
    solve_all_cards(machine, advance)
    advance(800)
    assert machine.step is Step.LIGHT_1

    pending = scheduler.pending_count
    machine.run_step_effects()
    machine.run_step_effects()
    assert scheduler.pending_count == pending

    advance(2500)
    assert machine.step is Step.LIGHT_2
    advance(1199)
    assert machine.step is Step.LIGHT_2


def test_reset_cancels_light_timer(machine, advance, scheduler):
    go_to_carousel(machine, advance)
    solve_all_cards(machine, advance)
    advance(800)
    assert machine.step is Step.LIGHT_1

    machine.reset()
    assert machine.step is Step.HOME
    advance(10000)
    assert machine.step is Step.HOME
    assert machine.profile.solved_count == 0
    assert machine.profile.display_name == ""


def test_teardown_stops_everything(machine, advance, scheduler):
    go_to_carousel(machine, advance)
    machine.open_card(1)
    machine.teardown()

    assert scheduler.pending_count == 0
    advance(10000)
    assert machine.snapshot().card_phase is CardPhase.CLOSED
    assert not machine.open_card(2)
    assert machine.torn_down


def test_teardown_during_name_fade(machine, advance):
    machine.click()
    machine.click()
    machine.submit_name("Alex")
    machine.teardown()
    advance(2000)
    assert machine.step is Step.NAME


def test_listener_receives_snapshot_per_change(machine, advance):
    snapshots = []
    machine.add_listener(snapshots.append)

    machine.click()
    machine.click()
    machine.submit_name("Alex")
    advance(1000)

    steps = [snapshot.step for snapshot in snapshots]
    assert steps[0] is Step.START
    assert Step.NAME in steps
    assert steps[-1] is Step.CAROUSEL
    assert any(snapshot.name_fading for snapshot in snapshots)

    machine.remove_listener(snapshots.append)
    count = len(snapshots)
    machine.open_card(1)
    assert len(snapshots) == count


def test_layer_flags_follow_step(machine, advance):
    machine.click()
    machine.click()
    snapshot = machine.snapshot()
    assert snapshot.render_game_layer
    assert snapshot.show_carousel_ui
    assert not snapshot.game_layer_interactive

    machine.submit_name("Alex")
    advance(1000)
    solve_all_cards(machine, advance)
    advance(800)
    snapshot = machine.snapshot()
    assert snapshot.step is Step.LIGHT_1
    assert snapshot.show_carousel_background
    assert not snapshot.show_carousel_ui
    assert snapshot.game_layer_interactive


@pytest.mark.parametrize("card_ids", [[1], [2, 5, 7]])
def test_small_decks_reach_light_1(card_ids, scheduler, logger, advance):
    machine = StepMachine(make_config(card_ids), scheduler, logger)
    go_to_carousel(machine, advance)
    solve_all_cards(machine, advance)
    advance(800)
    assert machine.step is Step.LIGHT_1
    assert machine.profile.solved_count == len(card_ids)
