import pytest

from fluid2d.pointer import PointerState


def test_move_without_press_does_nothing():
    p = PointerState()
    p.move(10, 10, 100, 100)
    assert not p.moved
    assert not p.consume()


def test_move_normalizes_position_and_direction():
    p = PointerState()
    p.press(50, 50)
    p.move(53, 46, 100, 100)   # 3 right, 4 up on screen

    assert p.position == pytest.approx([0.06, 0.08])
    # screen y down → simulation y up
    assert p.direction == pytest.approx([0.6, 0.8])
    assert p.length == pytest.approx(6.0)
    assert p.prev_position == [53, 46]
    assert p.moved


def test_corners_map_to_ndc_extremes():
    p = PointerState()
    p.press(0, 0)
    p.move(0, 0, 200, 100)
    assert p.position == pytest.approx([-1.0, 1.0])
    p.move(200, 100, 200, 100)
    assert p.position == pytest.approx([1.0, -1.0])


def test_zero_length_move_has_zero_direction():
    p = PointerState()
    p.press(20, 20)
    p.move(20, 20, 100, 100)
    assert p.direction == [0.0, 0.0]
    assert p.length == 1.0
    assert p.moved


def test_consume_is_single_shot():
    p = PointerState()
    p.press(0, 0)
    p.move(5, 0, 100, 100)

    assert p.consume()
    # still pressed, but not moved again → no second impulse
    assert p.pressed
    assert not p.consume()

    p.move(6, 0, 100, 100)
    assert p.consume()


def test_release_clears_flags():
    p = PointerState()
    p.press(0, 0)
    p.move(5, 0, 100, 100)
    p.release()
    assert not p.pressed
    assert not p.consume()


def test_touch_uses_first_touch_only():
    p = PointerState()
    p.press(0, 0)
    p.touch_move([(10, 0), (90, 90)], 100, 100)
    assert p.prev_position == [10, 0]
    assert p.direction == pytest.approx([1.0, 0.0])

    p.touch_move([], 100, 100)
    assert p.prev_position == [10, 0]
