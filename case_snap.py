"""Single-piece snap-in AirTag holder with a carry loop.

A chamfered cylindrical cup holds the tag from its flat back up past the
widest rim. The rim above the widest point is split by tapered slots into
flexible fingers, so the tag clicks in and is held by the lip. A rounded
loop on one side takes a key ring or a lanyard.
"""
import logging
import math
from typing import Optional

import cadquery as cq

from airtag_common import (
    AIRTAG_RADIUS,
    CUT_EPSILON,
    DEFAULT_PROFILE,
    GeometryError,
    TagProfile,
    checked,
    envelope,
    repeat_around_z,
)

logger = logging.getLogger(__name__)

PRODUCT = "snap"

TOLERANCE = 0.25
CHAMFER_SIZE = 1.2

AIRTAG_ZERO_Z = 0.88  # tag profile height that sits on the holder's z=0

WALL_THICKNESS = 2.0
TOP_EXTENSION = 1.8  # rim height above the tag's widest point

SPLIT_WIDTH = 13.0
SPLIT_COUNT = 3
SPLIT_SLOPE_LENGTH = 2.0

LOOP_THICKNESS = 3.0
LOOP_WIDTH = 4.0
LOOP_CORNER_RADIUS = 5.0
LOOP_INNER_SIZE = (4.0, 20.5)


def outer_diameter(radius: float = AIRTAG_RADIUS, wall: float = WALL_THICKNESS) -> float:
    return radius * 2 + wall * 2


def full_height(
    profile: TagProfile = DEFAULT_PROFILE,
    zero_z: float = AIRTAG_ZERO_Z,
    top_extension: float = TOP_EXTENSION,
) -> float:
    return profile.widest_point_z - zero_z + top_extension


def split_bounds(
    profile: TagProfile = DEFAULT_PROFILE,
    zero_z: float = AIRTAG_ZERO_Z,
    top_extension: float = TOP_EXTENSION,
):
    """Z range of the finger slots: from the widest point up to the rim."""
    height = full_height(profile, zero_z, top_extension)
    bottom = height - top_extension
    if top_extension <= 0:
        raise GeometryError(f"top_extension must be positive, got {top_extension}")
    if bottom < 0:
        raise GeometryError(f"split slots would start below the floor (z={bottom:.2f})")
    return bottom, height


def validate_splits(
    count: int = SPLIT_COUNT,
    width: float = SPLIT_WIDTH,
    slope: float = SPLIT_SLOPE_LENGTH,
    diameter: Optional[float] = None,
):
    if diameter is None:
        diameter = outer_diameter()
    if count < 1:
        raise GeometryError(f"split count must be >= 1, got {count}")
    if width <= 0 or slope < 0:
        raise GeometryError(f"split width must be positive and slope >= 0 (width={width}, slope={slope})")
    # widest end of each slot must leave some rim between neighbours
    if count > 1 and (width + 2 * slope) * count >= math.pi * diameter:
        raise GeometryError(f"{count} splits of width {width + 2 * slope} leave no fingers on the rim")


def body(diameter: float, height: float, chamfer: float = CHAMFER_SIZE) -> cq.Workplane:
    if 2 * chamfer >= height:
        raise GeometryError(f"chamfer {chamfer} too large for a {height:.2f} high body")
    return (
        cq.Workplane("XY")
        .circle(diameter / 2)
        .extrude(height)
        .faces(">Z or <Z")
        .chamfer(chamfer)
    )


def rounded_rect(length: float, width: float, height: float, radius: float) -> cq.Workplane:
    # X from the axis outwards, centred on Y, bottom at z=0. Only the far
    # corners are rounded, the near end is buried in the cup.
    return (
        cq.Workplane("XY")
        .box(length, width, height, centered=(False, True, False))
        .edges("|Z and >X")
        .fillet(radius)
    )


def loop(
    diameter: Optional[float] = None,
    thickness: float = LOOP_THICKNESS,
    width: float = LOOP_WIDTH,
    corner_radius: float = LOOP_CORNER_RADIUS,
    inner_size=LOOP_INNER_SIZE,
    chamfer: float = CHAMFER_SIZE,
) -> cq.Workplane:
    """Carry loop: a rounded ring reaching from the axis past the cup's side."""
    if diameter is None:
        diameter = outer_diameter()
    if width <= 0 or thickness <= 0 or min(inner_size) <= 0:
        raise GeometryError(f"loop sizes must be positive (width={width}, thickness={thickness}, inner={inner_size})")
    if corner_radius <= width:
        raise GeometryError(f"loop corner radius {corner_radius} must exceed loop width {width}")
    if 2 * chamfer >= thickness:
        raise GeometryError(f"chamfer {chamfer} too large for a {thickness} thick loop")

    inner_x = inner_size[0] + diameter / 2
    inner_y = inner_size[1]
    outer = rounded_rect(inner_x + width, inner_y + 2 * width, thickness, corner_radius)
    hole = rounded_rect(
        inner_x + CUT_EPSILON, inner_y, thickness + 2 * CUT_EPSILON, corner_radius - width
    ).translate((-CUT_EPSILON, 0, -CUT_EPSILON))
    return outer.cut(hole).faces(">Z or <Z").chamfer(chamfer)


def split_cutter(
    diameter: Optional[float] = None,
    width: float = SPLIT_WIDTH,
    slope: float = SPLIT_SLOPE_LENGTH,
    height: float = TOP_EXTENSION,
) -> cq.Workplane:
    """Tapered slot, narrow at the bottom and ``2 * slope`` wider at the top."""
    if diameter is None:
        diameter = outer_diameter()
    length = diameter / 2 + 1
    return (
        cq.Workplane("XY")
        .rect(length, width, centered=(False, True))
        .workplane(offset=height + CUT_EPSILON)
        .rect(length, width + 2 * slope, centered=(False, True))
        .loft(ruled=True)
    )


def build(
    profile: TagProfile = DEFAULT_PROFILE,
    tolerance: float = TOLERANCE,
    wall: float = WALL_THICKNESS,
    zero_z: float = AIRTAG_ZERO_Z,
    top_extension: float = TOP_EXTENSION,
    split_count: int = SPLIT_COUNT,
    split_width: float = SPLIT_WIDTH,
    split_slope: float = SPLIT_SLOPE_LENGTH,
    chamfer: float = CHAMFER_SIZE,
    loop_thickness: float = LOOP_THICKNESS,
    loop_width: float = LOOP_WIDTH,
    loop_corner_radius: float = LOOP_CORNER_RADIUS,
    loop_inner_size=LOOP_INNER_SIZE,
) -> cq.Workplane:
    logger.debug(f"Building {PRODUCT}")
    if wall <= 0:
        raise GeometryError(f"wall thickness must be positive, got {wall}")
    diameter = outer_diameter(profile.radius, wall)
    split_z, height = split_bounds(profile, zero_z, top_extension)
    validate_splits(split_count, split_width, split_slope, diameter)

    holder = checked(PRODUCT, "body", body, diameter, height, chamfer)
    ring = checked(
        PRODUCT, "loop ring", loop, diameter, loop_thickness, loop_width, loop_corner_radius, loop_inner_size, chamfer
    )
    holder = checked(PRODUCT, "loop", holder.union, ring)

    cavity = checked(PRODUCT, "cavity", envelope, tolerance, profile)
    holder = checked(PRODUCT, "pocket", holder.cut, cavity.translate((0, 0, -zero_z)))

    splits = repeat_around_z(split_cutter(diameter, split_width, split_slope, top_extension), split_count)
    return checked(PRODUCT, "splits", holder.cut, splits.translate((0, 0, split_z)))
