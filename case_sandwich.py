"""Two-piece "sandwich" AirTag holder.

Two identical square blocks, each holding one half of the tag. The bottom
is the basic shell; the top has the pocket flipped so the two faces meet at
the tag's widest rim. The halves are printed next to each other and glued
or pressed together.
"""
import logging

import cadquery as cq

from airtag_common import DEFAULT_PROFILE, TagProfile, checked, envelope, lay_out
from case_basic import BOX_MARGIN, BOX_TOLERANCE, FLOOR, blank, box_size, build_shell

logger = logging.getLogger(__name__)

PRODUCT = "sandwich"


def build_bottom(
    profile: TagProfile = DEFAULT_PROFILE,
    margin: float = BOX_MARGIN,
    tolerance: float = BOX_TOLERANCE,
    floor: float = FLOOR,
) -> cq.Workplane:
    return build_shell(PRODUCT, profile, margin, tolerance, floor)


def build_top(
    profile: TagProfile = DEFAULT_PROFILE,
    margin: float = BOX_MARGIN,
    tolerance: float = BOX_TOLERANCE,
    floor: float = FLOOR,
) -> cq.Workplane:
    size = box_size(profile, margin, floor)
    cavity = checked(PRODUCT, "lid cavity", envelope, tolerance, profile, flipped=True)
    cavity = cavity.translate((0, 0, size[2] + profile.widest_point_z))
    return checked(PRODUCT, "lid pocket", blank(size).cut, cavity)


def build(**params) -> cq.Workplane:
    logger.debug(f"Building {PRODUCT}")
    return checked(PRODUCT, "layout", lay_out, [build_bottom(**params), build_top(**params)])
