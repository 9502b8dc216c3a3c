"""Bolted two-piece AirTag holder.

Both halves are tri-lobed plates: the convex hull of three round corners
spaced 120 degrees apart around the tag. Each corner carries an M3 through
hole. The bottom half has square nut traps under the holes, the top half has
countersinks for flat-head bolts.

Nut traps print upside down (open side on the bed), so their ceiling would
be an unsupported overhang. Above each trap a one-layer slot, as long as the
nut and as wide as the bolt hole, is cut out as well: the slicer bridges the
first layer over the trap along the slot's sides, and the next layer bridges
the short way across the slot down to the hole.
"""
from dataclasses import dataclass
import logging
from typing import Optional

import cadquery as cq

from airtag_common import (
    AIRTAG_RADIUS,
    AIRTAG_WIDEST_POINT_Z,
    CUT_EPSILON,
    DEFAULT_PROFILE,
    GeometryError,
    TagProfile,
    checked,
    envelope,
    lay_out,
    polar_points,
    repeat_around_z,
)

logger = logging.getLogger(__name__)

PRODUCT = "nutsandbolts"

FLOOR = 0.4  # plate material under the tag's widest point
THICKNESS = AIRTAG_WIDEST_POINT_Z + FLOOR  # per half
TOLERANCE = 0.15

SHAPE_CORNER_SIZE = 11.0  # diameter of each round corner
HOLE_MARGIN = 1.5  # from the tag rim to the edge of a corner
HOLE_OFFSET = AIRTAG_RADIUS + SHAPE_CORNER_SIZE / 2 + HOLE_MARGIN  # bolt axis distance from centre
HOLE_DIAMETER = 3.0 + 0.6  # M3 + clearance
BOLT_COUNT = 3

SQUARE_NUT_WIDTH = 5.4 + 0.3
SQUARE_NUT_THICKNESS = 1.8
SQUARE_NUT_TRAP_EXTRA_DEPTH = 1.2

COUNTERSINK_TOP_DIAMETER = 5.8 + 0.6
COUNTERSINK_HEIGHT = 2.0

LAYER_THICKNESS = 0.1
BOTTOM_ROTATION = 60.0  # degrees, nests the bottom lobes away from the top half


@dataclass(frozen=True)
class BoltedSizes:
    """Every size of the bolted holder; thickness defaults to widest point + FLOOR."""

    profile: TagProfile = DEFAULT_PROFILE
    tolerance: float = TOLERANCE
    thickness: Optional[float] = None
    corner_size: float = SHAPE_CORNER_SIZE
    hole_diameter: float = HOLE_DIAMETER
    nut_width: float = SQUARE_NUT_WIDTH
    nut_thickness: float = SQUARE_NUT_THICKNESS
    trap_extra_depth: float = SQUARE_NUT_TRAP_EXTRA_DEPTH
    countersink_top: float = COUNTERSINK_TOP_DIAMETER
    countersink_height: float = COUNTERSINK_HEIGHT
    layer_thickness: float = LAYER_THICKNESS

    @property
    def plate_thickness(self) -> float:
        if self.thickness is None:
            return self.profile.widest_point_z + FLOOR
        return self.thickness

    @property
    def hole_offset(self) -> float:
        return self.profile.radius + self.corner_size / 2 + HOLE_MARGIN

    @property
    def cavity_radius(self) -> float:
        return self.profile.radius + self.tolerance

    def validate(self) -> "BoltedSizes":
        """Reject fastener sizes that don't fit the plate."""
        self.profile.validate()
        thickness = self.plate_thickness
        sizes = {
            "thickness": thickness,
            "corner_size": self.corner_size,
            "hole_diameter": self.hole_diameter,
            "nut_width": self.nut_width,
            "nut_thickness": self.nut_thickness,
            "countersink_top": self.countersink_top,
            "countersink_height": self.countersink_height,
            "layer_thickness": self.layer_thickness,
        }
        for name, value in sizes.items():
            if value <= 0:
                raise GeometryError(f"{name} must be positive, got {value}")
        if self.trap_extra_depth < 0:
            raise GeometryError(f"trap_extra_depth must be >= 0, got {self.trap_extra_depth}")
        if self.tolerance < 0:
            raise GeometryError(f"tolerance must be >= 0, got {self.tolerance}")

        if self.hole_diameter >= self.corner_size:
            raise GeometryError(f"hole diameter {self.hole_diameter} doesn't fit in a {self.corner_size} corner")
        if self.nut_width >= self.corner_size:
            raise GeometryError(f"nut trap {self.nut_width} is wider than the {self.corner_size} corner")
        if self.countersink_top >= self.corner_size:
            raise GeometryError(f"countersink {self.countersink_top} is wider than the {self.corner_size} corner")
        if self.hole_diameter >= self.nut_width:
            raise GeometryError(f"hole diameter {self.hole_diameter} must be smaller than the nut {self.nut_width}")
        if self.countersink_top <= self.hole_diameter:
            raise GeometryError(
                f"countersink {self.countersink_top} must be wider than the hole {self.hole_diameter}"
            )

        trap_depth = self.nut_thickness + self.trap_extra_depth + self.layer_thickness
        if trap_depth >= thickness:
            raise GeometryError(f"nut trap depth {trap_depth:.2f} cuts through the {thickness} plate")
        if self.countersink_height >= thickness:
            raise GeometryError(f"countersink height {self.countersink_height} cuts through the {thickness} plate")
        if thickness <= self.profile.widest_point_z:
            raise GeometryError(f"plate {thickness} leaves no floor under the widest point")
        if thickness <= self.profile.thickness - self.profile.widest_point_z:
            raise GeometryError(f"plate {thickness} leaves no roof over the tag's upper half")

        # cavity must stay clear of the bolt holes and inside the flat sides of the hull
        hole_edge = self.hole_offset - self.hole_diameter / 2
        if self.cavity_radius >= hole_edge:
            raise GeometryError(f"cavity radius {self.cavity_radius:.3f} reaches the bolt holes at {hole_edge:.3f}")
        side = self.hole_offset / 2 + self.corner_size / 2
        if self.cavity_radius >= side:
            raise GeometryError(f"cavity radius {self.cavity_radius:.3f} breaks through the plate side at {side:.3f}")
        return self


def validate(**params) -> BoltedSizes:
    return BoltedSizes(**params).validate()


def plate(
    thickness: float = THICKNESS,
    corner_size: float = SHAPE_CORNER_SIZE,
    hole_offset: float = HOLE_OFFSET,
    hole_diameter: float = HOLE_DIAMETER,
) -> cq.Workplane:
    centres = polar_points(hole_offset, BOLT_COUNT)
    # hull of equal circles == centre triangle offset by the radius with round joins
    body = (
        cq.Workplane("XY")
        .polyline(centres)
        .close()
        .offset2D(corner_size / 2, "arc")
        .extrude(thickness)
    )
    holes = (
        cq.Workplane("XY")
        .workplane(offset=-CUT_EPSILON)
        .pushPoints(centres)
        .circle(hole_diameter / 2)
        .extrude(thickness + 2 * CUT_EPSILON)
    )
    return body.cut(holes)


def nut_trap(
    nut_width: float = SQUARE_NUT_WIDTH,
    nut_thickness: float = SQUARE_NUT_THICKNESS,
    extra_depth: float = SQUARE_NUT_TRAP_EXTRA_DEPTH,
    hole_diameter: float = HOLE_DIAMETER,
    layer_thickness: float = LAYER_THICKNESS,
) -> cq.Workplane:
    depth = nut_thickness + extra_depth
    trap = cq.Workplane("XY").box(nut_width, nut_width, depth, centered=(True, True, False))
    bridge = (
        cq.Workplane("XY")
        .box(nut_width, hole_diameter, layer_thickness, centered=(True, True, False))
        .translate((0, 0, depth))
    )
    return trap.union(bridge)


def countersink(
    top_diameter: float = COUNTERSINK_TOP_DIAMETER,
    hole_diameter: float = HOLE_DIAMETER,
    height: float = COUNTERSINK_HEIGHT,
) -> cq.Workplane:
    # wide end at z=0, the outer face of the top half
    return (
        cq.Workplane("XY")
        .circle(top_diameter / 2)
        .workplane(offset=height)
        .circle(hole_diameter / 2)
        .loft()
    )


def _plate(sizes: BoltedSizes, feature: str) -> cq.Workplane:
    return checked(
        PRODUCT, feature, plate, sizes.plate_thickness, sizes.corner_size, sizes.hole_offset, sizes.hole_diameter
    )


def build_bottom(**params) -> cq.Workplane:
    sizes = validate(**params)
    thickness = sizes.plate_thickness
    half = _plate(sizes, "bottom plate")

    cavity = checked(PRODUCT, "bottom cavity", envelope, sizes.tolerance, sizes.profile)
    cavity = cavity.translate((0, 0, thickness - sizes.profile.widest_point_z))
    half = checked(PRODUCT, "bottom pocket", half.cut, cavity)

    trap = nut_trap(
        sizes.nut_width, sizes.nut_thickness, sizes.trap_extra_depth, sizes.hole_diameter, sizes.layer_thickness
    )
    traps = repeat_around_z(trap.translate((sizes.hole_offset, 0, -CUT_EPSILON)), BOLT_COUNT)
    return checked(PRODUCT, "nut traps", half.cut, traps)


def build_top(**params) -> cq.Workplane:
    sizes = validate(**params)
    thickness = sizes.plate_thickness
    half = _plate(sizes, "top plate")

    cavity = checked(PRODUCT, "top cavity", envelope, sizes.tolerance, sizes.profile, flipped=True)
    cavity = cavity.translate((0, 0, thickness + sizes.profile.widest_point_z))
    half = checked(PRODUCT, "top pocket", half.cut, cavity)

    sink = countersink(sizes.countersink_top, sizes.hole_diameter, sizes.countersink_height)
    sinks = repeat_around_z(sink.translate((sizes.hole_offset, 0, -CUT_EPSILON)), BOLT_COUNT)
    return checked(PRODUCT, "countersinks", half.cut, sinks)


def build(**params) -> cq.Workplane:
    logger.debug(f"Building {PRODUCT}")
    bottom = build_bottom(**params).rotate((0, 0, 0), (0, 0, 1), BOTTOM_ROTATION)
    return checked(PRODUCT, "layout", lay_out, [bottom, build_top(**params)])
