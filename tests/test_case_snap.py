import pytest

import case_snap as snap
from airtag_common import DEFAULT_PROFILE, GeometryError


def test_full_height():
    assert snap.full_height() == pytest.approx(4.17 - 0.88 + 1.8)


def test_split_bounds_stay_inside_body():
    bottom, top = snap.split_bounds()
    height = snap.full_height()
    assert bottom == pytest.approx(height - snap.TOP_EXTENSION)
    assert top == pytest.approx(height)
    assert 0 <= bottom < top


def test_split_bounds_reject_slot_below_floor():
    with pytest.raises(GeometryError):
        snap.split_bounds(DEFAULT_PROFILE, zero_z=6.0)


@pytest.mark.parametrize(
    "params",
    [{"count": 0}, {"width": 0.0}, {"slope": -1.0}, {"count": 8, "width": 13.0}],
)
def test_invalid_splits_rejected(params):
    with pytest.raises(GeometryError):
        snap.validate_splits(**params)


def test_loop_rejects_inverted_corners():
    with pytest.raises(GeometryError):
        snap.loop(corner_radius=3.0)


def test_split_cutter_tapers_upwards():
    cutter = snap.split_cutter()
    bb = cutter.val().BoundingBox()
    assert bb.xmin == pytest.approx(0.0, abs=1e-6)
    assert bb.xmax == pytest.approx(snap.outer_diameter() / 2 + 1, abs=1e-6)
    assert bb.ylen == pytest.approx(snap.SPLIT_WIDTH + 2 * snap.SPLIT_SLOPE_LENGTH, abs=1e-6)
    assert bb.zmin == pytest.approx(0.0, abs=1e-6)


def test_holder_extents():
    holder = snap.build()
    bb = holder.val().BoundingBox()
    radius = snap.outer_diameter() / 2
    loop_reach = snap.LOOP_INNER_SIZE[0] + radius + snap.LOOP_WIDTH

    assert holder.val().isValid()
    assert len(holder.solids().vals()) == 1
    assert bb.zmin == pytest.approx(0.0, abs=1e-3)
    assert bb.zmax == pytest.approx(snap.full_height(), abs=1e-3)
    assert bb.xmin == pytest.approx(-radius, abs=1e-3)
    assert bb.xmax == pytest.approx(loop_reach, abs=1e-3)


def test_more_splits_remove_more_material():
    one = snap.build(split_count=1).val().Volume()
    three = snap.build(split_count=3).val().Volume()
    assert three < one


def test_build_is_repeatable():
    assert snap.build().val().Volume() == pytest.approx(snap.build().val().Volume())


def test_build_rejects_loop_wider_than_corners():
    with pytest.raises(GeometryError):
        snap.build(loop_width=6.0)


def test_loop_overrides_reach_build():
    holder = snap.build(loop_inner_size=(6.0, 20.5))
    bb = holder.val().BoundingBox()
    assert bb.xmax == pytest.approx(6.0 + snap.outer_diameter() / 2 + snap.LOOP_WIDTH, abs=1e-3)
