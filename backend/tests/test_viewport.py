"""
Unit tests for viewport state and coordinate transforms.
"""

import pytest

from dyematch.services.imaging import viewport
from dyematch.services.imaging.sampler import SampleRegion


@pytest.fixture
def state():
    return viewport.create_viewport(400, 200)


class TestZoom:
    """Test zoom bounds and gestures"""

    def test_initial_state(self, state):
        assert state.zoom == 100
        assert (state.pan_x, state.pan_y) == (0, 0)
        assert state.drag is None

    def test_clamped(self, state):
        assert viewport.set_zoom(state, 1000) == 400
        assert viewport.set_zoom(state, 1) == 10
        assert viewport.zoom_by(state, -50) == 10

    def test_plain_wheel_never_zooms(self, state):
        assert viewport.wheel_zoom(state, -120, modifier=False) == 100
        assert viewport.wheel_zoom(state, 120, modifier=False) == 100

    def test_modifier_wheel_uses_fixed_step(self, state):
        assert viewport.wheel_zoom(state, -1, modifier=True) == 110
        assert viewport.wheel_zoom(state, -500, modifier=True) == 120
        assert viewport.wheel_zoom(state, 3, modifier=True) == 110

    def test_keys(self, state):
        assert viewport.key_zoom(state, "+") == 110
        assert viewport.key_zoom(state, "=") == 120
        assert viewport.key_zoom(state, "-") == 110
        assert viewport.key_zoom(state, "x") == 110
        assert viewport.key_zoom(state, "0") == 100

    def test_reset_for_new_image(self, state):
        viewport.set_zoom(state, 250)
        state.pan_x = 30
        viewport.begin_drag(state, 1, 1)

        viewport.reset(state, 50, 60)

        assert state.zoom == 100
        assert (state.pan_x, state.pan_y) == (0, 0)
        assert (state.surface_width, state.surface_height) == (50, 60)
        assert state.drag is None


class TestTransforms:
    """Test screen <-> raster mapping"""

    def test_zoom_200(self, state):
        viewport.set_zoom(state, 200)
        assert viewport.screen_to_raster(state, 20, 20) == (10, 10)

    def test_scroll_offset(self, state):
        viewport.set_zoom(state, 200)
        assert viewport.screen_to_raster(state, 20, 20, scroll_x=10) == (15, 10)

    def test_inverse(self, state):
        viewport.set_zoom(state, 150)
        state.pan_x, state.pan_y = -12.5, 4
        raster = viewport.screen_to_raster(state, 33, 71, 5, 9)
        screen = viewport.raster_to_screen(state, *raster, 5, 9)
        assert screen == pytest.approx((33, 71))


class TestFit:
    """Test fit-to-container"""

    def test_fit_limiting_dimension_and_center(self, state):
        assert viewport.fit_to_container(state, 200, 200) == 50
        assert state.pan_x == 0
        assert state.pan_y == -100
        # Image is 100 screen px tall in a 200 px container
        assert viewport.screen_to_raster(state, 0, 50) == (0, 0)

    def test_fit_width(self, state):
        assert viewport.fit_to_container(state, 800, 100, mode="width") == 200

    def test_fit_is_clamped(self):
        huge = viewport.create_viewport(10000, 10000)
        assert viewport.fit_to_container(huge, 100, 100) == 10

    def test_zero_container_is_ignored(self, state):
        viewport.set_zoom(state, 130)
        assert viewport.fit_to_container(state, 0, 100) == 130

    def test_unknown_mode(self, state):
        with pytest.raises(ValueError):
            viewport.fit_to_container(state, 100, 100, mode="height")


class TestDrag:
    """Test drag-to-select"""

    def test_region_covers_rectangle(self, state):
        viewport.begin_drag(state, 10, 10)
        assert viewport.update_drag(state, 20, 15) == (10, 10, 10, 5)
        region = viewport.end_drag(state, 30, 20)

        assert region == SampleRegion(x=20, y=15, size=20)
        assert state.drag is None

    def test_reverse_drag_is_normalized(self, state):
        viewport.begin_drag(state, 30, 20)
        assert viewport.end_drag(state, 10, 10) == SampleRegion(x=20, y=15, size=20)

    def test_small_drag_is_point_sample(self, state):
        viewport.begin_drag(state, 5, 5)
        assert viewport.end_drag(state, 6, 6) == SampleRegion(x=5.5, y=5.5, size=1)

    def test_end_without_begin(self, state):
        assert viewport.end_drag(state, 1, 1) is None
        assert viewport.update_drag(state, 1, 1) is None

    def test_cancel(self, state):
        viewport.begin_drag(state, 1, 1)
        viewport.cancel_drag(state)
        assert viewport.selection_rect(state) is None
