"""Tests for easing, frame scheduling and the zoom controller."""

import pytest

from SCHEMA2ERD.config import InteractionConfig
from SCHEMA2ERD.interaction import (
    Animation,
    CoalescedFrame,
    FrameScheduler,
    Tween,
    ZoomController,
    ZoomTransform,
    ease_cubic_in_out,
)
from SCHEMA2ERD.layout import Bounds


def test_cubic_in_out_endpoints_and_midpoint():
    assert ease_cubic_in_out(0.0) == 0.0
    assert ease_cubic_in_out(0.5) == 0.5
    assert ease_cubic_in_out(1.0) == 1.0
    assert ease_cubic_in_out(0.25) < 0.25


def test_tween_clamps_progress():
    t = Tween(0.0, 10.0)
    assert t.value_at(0.5) == 5.0
    assert t.value_at(-1) == 0.0
    assert t.value_at(2) == 10.0


def test_animation_reports_progress_and_ends_once():
    seen = []
    ended = []
    anim = Animation(200, seen.append, lambda: ended.append(True))

    assert anim.step(100) is True  # first step fixes the start time
    assert anim.step(200) is True
    assert anim.step(300) is False
    assert anim.step(400) is False
    assert seen == [0.0, 0.5, 1.0]
    assert ended == [True]


def test_coalesced_frame_runs_once_per_tick():
    scheduler = FrameScheduler()
    calls = []
    frame = CoalescedFrame(scheduler, lambda: calls.append(scheduler.now_ms))

    for _ in range(5):
        frame.request()
    assert scheduler.pending_frames == 1
    scheduler.tick(16)
    assert calls == [16]
    assert frame.runs == 1
    scheduler.tick(32)
    assert calls == [16]


def test_requests_made_during_a_tick_wait_for_the_next_one():
    scheduler = FrameScheduler()
    order = []

    def first():
        order.append("first")
        scheduler.request(lambda: order.append("second"))

    scheduler.request(first)
    scheduler.tick(0)
    assert order == ["first"]
    scheduler.tick(16)
    assert order == ["first", "second"]


def test_timers_fire_when_due_and_can_be_cancelled():
    scheduler = FrameScheduler()
    fired = []
    scheduler.call_later(220, lambda: fired.append("a"))
    cancelled = scheduler.call_later(100, lambda: fired.append("b"))
    cancelled.cancel()

    scheduler.tick(219)
    assert fired == []
    scheduler.tick(220)
    assert fired == ["a"]


def test_zoom_transform_apply_and_invert():
    t = ZoomTransform(2.0, 10.0, -5.0)
    assert t.apply((3, 4)) == (16.0, 3.0)
    assert t.invert((16.0, 3.0)) == (3.0, 4.0)
    assert t.to_svg() == "translate(10,-5) scale(2)"


def _zoom(width=800, height=600):
    return ZoomController(width, height, InteractionConfig())


def test_wheel_zooms_about_the_pointer():
    zoom = _zoom()
    zoom.wheel(-500, (100, 100))
    assert zoom.transform == ZoomTransform(2.0, -100.0, -100.0)
    # the content point under the pointer stays under the pointer
    assert zoom.transform.apply((100, 100)) == (100.0, 100.0)


def test_wheel_respects_scale_extent():
    zoom = _zoom()
    zoom.wheel(-5000, (0, 0))
    assert zoom.transform.k == 3.0
    zoom.wheel(50000, (0, 0))
    assert zoom.transform.k == pytest.approx(0.2)


def test_wheel_line_mode_uses_larger_step():
    zoom = _zoom()
    zoom.wheel(-20, (0, 0), delta_mode=1)
    assert zoom.transform.k == pytest.approx(2.0)


def test_zoom_in_animates_about_viewport_centre():
    zoom = _zoom()
    zoom.zoom_in()
    assert zoom.transform.k == 1.0
    assert zoom.is_animating

    zoom.advance(0)
    zoom.advance(100)
    mid = zoom.transform
    assert 1.0 < mid.k < 1.2
    assert zoom.current_center() == pytest.approx((400.0, 300.0))

    assert zoom.advance(200) is False
    assert zoom.transform.k == pytest.approx(1.2)
    assert zoom.current_center() == pytest.approx((400.0, 300.0))
    assert not zoom.is_animating


def test_zoom_out_then_reset():
    zoom = _zoom()
    zoom.zoom_out()
    zoom.advance(0)
    zoom.advance(500)
    assert zoom.transform.k == pytest.approx(1 / 1.2)
    zoom.reset()
    assert zoom.transform == ZoomTransform()


def test_gesture_interrupts_running_transition():
    zoom = _zoom()
    zoom.zoom_in()
    zoom.advance(0)
    zoom.pan_by(10, 0)
    assert not zoom.is_animating
    assert zoom.transform == ZoomTransform(1.0, 10.0, 0.0)
    assert zoom.advance(500) is False


def test_fit_to_bounds():
    zoom = _zoom(1000, 800)
    t = zoom.fit_to_bounds(Bounds(0, 0, 460, 360), padding=40)
    assert t == ZoomTransform(2.0, 40.0, 40.0)
    assert zoom.transform == t


def test_fit_to_bounds_leaves_reserved_bottom_free():
    zoom = _zoom(1000, 800)
    t = zoom.fit_to_bounds(Bounds(0, 0, 460, 360), padding=40, reserved_bottom=100)
    assert t.k == pytest.approx(620 / 360)
    # content is centred in the area above the reserved strip
    top = t.apply((0, 0))[1]
    bottom = t.apply((0, 360))[1]
    assert top == pytest.approx(40.0)
    assert (800 - 100) - bottom == pytest.approx(40.0)


def test_fit_clamps_scale_for_tiny_content():
    zoom = _zoom()
    t = zoom.fit_to_bounds(Bounds(10, 10, 10, 10))
    assert t.k == 3.0


def test_pan_to_point():
    zoom = _zoom()
    zoom.pan_to_point(100, 50, animate=False)
    assert zoom.transform == ZoomTransform(1.0, 300.0, 250.0)
    assert zoom.current_center() == (100.0, 50.0)

    zoom.pan_to_point(0, 0, scale=2.0)
    zoom.advance(0)
    zoom.advance(450)
    assert zoom.transform.k == pytest.approx(2.0)
    assert zoom.current_center() == pytest.approx((0.0, 0.0))


def test_on_change_receives_every_transform():
    seen = []
    zoom = ZoomController(800, 600, InteractionConfig(), on_change=seen.append)
    zoom.pan_by(5, 5)
    zoom.wheel(-500, (0, 0))
    assert len(seen) == 2
    assert seen[-1].k == 2.0
