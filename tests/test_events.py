from gbvm.events import (
    NUM_INPUTS,
    SOFT_RESTART,
    Buttons,
    EventSlots,
    InputState,
    Timers,
)


def test_pressed_only_on_first_frame():
    state = InputState()
    state.update(Buttons.A)
    assert state.pressed(Buttons.A) is True
    state.update(Buttons.A)
    assert state.pressed(Buttons.A) is False
    assert state.held(Buttons.A) is True


def test_held_false_when_released():
    state = InputState()
    state.update(Buttons.B)
    state.update(0)
    assert state.held(Buttons.B) is False


def test_recent_follows_latest_direction():
    state = InputState()
    state.update(Buttons.LEFT)
    state.update(Buttons.LEFT | Buttons.UP)
    assert state.recent(Buttons.UP) is True
    assert state.recent(Buttons.LEFT) is False


def test_recent_falls_back_to_held_after_release():
    state = InputState()
    state.update(Buttons.LEFT)
    state.update(Buttons.LEFT | Buttons.UP)
    state.update(Buttons.LEFT)
    assert state.recent(Buttons.LEFT) is True


def test_reset_marks_buttons_seen():
    state = InputState()
    state.update(Buttons.START)
    state.reset()
    assert state.pressed(Buttons.START) is False
    assert state.any_pressed() is False


def test_changed_with_mask():
    state = InputState()
    state.update(Buttons.A)
    assert state.changed_with(Buttons.A) is True
    assert state.changed_with(Buttons.B) is False
    state.update(Buttons.A)
    assert state.changed_with(Buttons.A) is False


def test_soft_restart_combo():
    state = InputState()
    state.update(SOFT_RESTART)
    assert state.soft_restart() is True


def test_attach_and_detach_slots():
    slots = EventSlots()
    slots.attach(Buttons.A | Buttons.RIGHT, 3)
    assert slots.slots[0] == 3
    assert slots.slots[4] == 3
    assert slots.slots.count(3) == 2
    slots.detach(Buttons.RIGHT)
    assert slots.slots[0] == 0
    assert slots.slots[4] == 3


def test_prepare_uses_one_based_slot():
    slots = EventSlots()
    slots.prepare(1, 5, 0x1234)
    assert (slots.events[0].bank, slots.events[0].addr) == (5, 0x1234)
    slots.prepare(NUM_INPUTS + 1, 6, 0x10)
    assert slots.events[0].bank == 6


def test_timer_set_stop_reset():
    timers = Timers()
    timers.set(2, 30)
    entry = timers.values[1]
    assert (entry.value, entry.remains) == (30, 30)
    entry.remains = 5
    timers.reset(2)
    assert entry.remains == 30
    timers.stop(2)
    assert entry.value == 0
    assert entry.remains == 30


def test_timer_prepare():
    timers = Timers()
    timers.prepare(4, 7, 0x4000)
    assert (timers.events[3].bank, timers.events[3].addr) == (7, 0x4000)