import pytest

import airtag_common as common
import case_basic
import case_sandwich


def test_bottom_matches_basic_shell():
    bottom = case_sandwich.build_bottom().val()
    basic = case_basic.build().val()
    assert bottom.Volume() == pytest.approx(basic.Volume())


def test_top_half_is_valid_and_same_blank():
    top = case_sandwich.build_top()
    bb = top.val().BoundingBox()
    assert top.val().isValid()
    assert bb.xlen == pytest.approx(35.87, abs=1e-3)
    assert bb.zlen == pytest.approx(4.97, abs=1e-3)
    assert len(top.solids().vals()) == 1


def test_halves_laid_out_side_by_side():
    pair = case_sandwich.build()
    bb = pair.val().BoundingBox()
    assert len(pair.solids().vals()) == 2
    assert bb.xlen == pytest.approx(common.LAYOUT_SPACING + 35.87, abs=1e-3)
    assert bb.ylen == pytest.approx(35.87, abs=1e-3)


def test_total_volume_is_sum_of_halves():
    pair = case_sandwich.build().val().Volume()
    halves = case_sandwich.build_bottom().val().Volume() + case_sandwich.build_top().val().Volume()
    assert pair == pytest.approx(halves, rel=1e-6)
