import numpy as np
import pytest

from kinectpaint.core.errors import CalibrationError
from kinectpaint.core.frame_data import EngineState, FusedFrame
from kinectpaint.modules.color_picker import vivid
from kinectpaint.modules.painting import PaintingEngine, PaintSession

from helpers import (PATCH_BGR, SAMPLE_BGR, fused_frame, hole_color_point, hue_sat_val,
                     make_skeleton, patched_color, solid_color)


@pytest.fixture
def engine(settings, mapper):
    return PaintingEngine(settings, mapper)


@pytest.fixture
def session(settings):
    return PaintSession(settings)


def test_no_signal_shows_fallback_color(engine, session, settings):
    result = engine.process(session, FusedFrame(), make_skeleton())
    assert result.state == EngineState.NO_SIGNAL
    assert result.display.shape == (480, 640, 3)
    assert (result.display == np.array(settings.fallback_color, dtype=np.uint8)).all()
    assert session.canvas is None


def test_no_person_shows_copy_of_color(engine, session):
    fused = fused_frame()
    session.ensure_canvas()[:] = 42

    result = engine.process(session, fused, None)
    assert result.state == EngineState.NO_PERSON
    assert np.array_equal(result.display, fused.color)
    assert result.display is not fused.color
    assert (session.canvas == 42).all()


def test_missing_depth_degrades_to_no_person(engine, session):
    result = engine.process(session, fused_frame(depth=False), make_skeleton())
    assert result.state == EngineState.NO_PERSON


def test_stale_frames_only_when_allowed(settings, mapper):
    fresh = fused_frame()

    strict = PaintingEngine(settings, mapper)
    strict_session = PaintSession(settings)
    strict.process(strict_session, fresh, None)
    assert strict.process(strict_session, FusedFrame(), None).state == EngineState.NO_SIGNAL

    settings.allow_stale_frames = True
    lenient = PaintingEngine(settings, mapper)
    lenient_session = PaintSession(settings)
    lenient.process(lenient_session, fresh, None)
    result = lenient.process(lenient_session, FusedFrame(), None)
    assert result.state == EngineState.NO_PERSON
    assert np.array_equal(result.display, fresh.color)


def test_tracking_calibrates_once(engine, session):
    assert session.homography is None
    result = engine.process(session, fused_frame(), make_skeleton())
    assert result.state == EngineState.TRACKING
    cached = session.homography
    assert cached is not None

    engine.process(session, fused_frame(), make_skeleton())
    assert session.homography is cached


def test_calibration_failure_retries_next_frame(engine, session, monkeypatch):
    real = engine.estimator.compute_homography
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise CalibrationError("collinear")
        return real()

    monkeypatch.setattr(engine.estimator, "compute_homography", flaky)

    first = engine.process(session, fused_frame(), make_skeleton())
    assert first.state == EngineState.NO_PERSON
    assert session.homography is None

    second = engine.process(session, fused_frame(), make_skeleton())
    assert second.state == EngineState.TRACKING
    assert len(calls) == 2


def test_canvas_untouched_without_brush(engine, session):
    rng = np.random.default_rng(0)
    canvas = session.ensure_canvas()
    canvas[:] = rng.integers(0, 256, canvas.shape, dtype=np.uint8)
    before = canvas.copy()

    for _ in range(5):
        result = engine.process(session, fused_frame(hand_mm=None), make_skeleton())
        assert result.state == EngineState.TRACKING
        assert not result.brush_mask.any()
    assert np.array_equal(session.canvas, before)


def test_extended_hand_paints_in_brush_color(engine, session):
    result = engine.process(session, fused_frame(hand_mm=1600), make_skeleton())
    assert result.brush_mask.any()

    canvas = session.canvas
    assert canvas[:, :, 2].max() > 0      # red, the default brush
    assert canvas[:, :, 0].max() == 0
    assert canvas[:, :, 1].max() == 0


def test_paint_builds_up_and_saturates(engine, session):
    homography = engine.ensure_homography(session)
    brush = np.zeros((240, 320), dtype=np.uint8)
    brush[80:160, 120:200] = 255

    previous = session.ensure_canvas().copy()
    for _ in range(40):
        engine.stamp(session, brush, homography)
        assert (session.canvas >= previous).all()
        previous = session.canvas.copy()

    # center of the stroke is fully red; after one stamp it was not
    assert session.canvas[240, 320, 2] == 255
    fresh = PaintSession(engine.settings)
    engine.stamp(fresh, brush, homography)
    assert 0 < fresh.canvas[240, 320, 2] < 255


def test_erase_gesture_clears_canvas(engine, session):
    session.ensure_canvas()[:] = 200
    result = engine.process(session, fused_frame(hand_mm=1600), make_skeleton(erase_pose=True))
    assert result.erased
    assert not session.canvas.any()


def test_erase_request_applied_on_next_frame(engine, session):
    session.ensure_canvas()[:] = 99
    session.request_erase()
    engine.process(session, fused_frame(), None)
    assert not session.canvas.any()
    assert not session.erase_requested


def test_erase_clicked_during_a_step_is_kept(engine, session, monkeypatch):
    session.ensure_canvas()[:] = 99
    session.request_erase()
    clear = session.clear_canvas

    def clear_then_click():
        clear()
        session.request_erase()

    monkeypatch.setattr(session, "clear_canvas", clear_then_click)
    engine.process(session, fused_frame(), None)
    assert session.erase_requested
    monkeypatch.undo()

    session.canvas[:] = 5
    engine.process(session, fused_frame(), None)
    assert not session.canvas.any()
    assert not session.erase_requested


def test_recalibration_request(engine, session):
    engine.process(session, fused_frame(), make_skeleton())
    old = session.homography
    session.request_recalibration()
    engine.process(session, fused_frame(), make_skeleton())
    assert session.homography is not None
    assert session.homography is not old


def test_hole_gesture_picks_vivid_color(engine, session):
    result = engine.process(session, fused_frame(hand_mm=1800, hole=True), make_skeleton())

    assert result.picker_point is not None
    assert session.brush_color == vivid(SAMPLE_BGR, 2.0, 1.5)
    h0, s0, v0 = hue_sat_val(SAMPLE_BGR)
    h1, s1, v1 = hue_sat_val(session.brush_color)
    assert h1 == pytest.approx(h0, abs=2.0)
    assert s0 <= s1 <= 1.0
    assert v0 <= v1 <= 1.0


def test_hole_samples_the_color_behind_it(engine, session, mapper):
    fused = fused_frame(hand_mm=1800, hole=True)
    fused.color = patched_color(hole_color_point(mapper))

    result = engine.process(session, fused, make_skeleton())
    assert result.picker_point is not None
    assert session.brush_color == vivid(PATCH_BGR, 2.0, 1.5)


def test_display_is_half_canvas_while_tracking(engine, session):
    canvas = session.ensure_canvas()
    canvas[:] = (0, 0, 255)
    result = engine.process(session, fused_frame(), make_skeleton())
    # color is SAMPLE_BGR everywhere; top-left lies outside the registered player
    b, g, r = (int(c) for c in result.display[5, 5])
    assert r > g and r > b
    assert result.display is not session.canvas


def test_color_image_is_not_modified(engine, session):
    fused = fused_frame(hand_mm=1800, hole=True)
    before = fused.color.copy()
    engine.process(session, fused, make_skeleton())
    assert np.array_equal(fused.color, before)
    assert np.array_equal(before, solid_color())
