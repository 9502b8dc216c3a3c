"""Shared AirTag model used by every holder recipe.

The tag is described by one half cross-section (`AIRTAG_PROFILE`) that is
revolved around the Z axis to get the cavity every holder subtracts from its
blank. Placement helpers for three-point layouts and side-by-side parts live
here too, along with the error types the recipes raise.
"""
from dataclasses import dataclass
import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import cadquery as cq

logger = logging.getLogger(__name__)

# Tag dimensions (mm)
AIRTAG_RADIUS = 15.935
AIRTAG_THICKNESS = 7.98
AIRTAG_WIDEST_POINT_Z = 4.17  # height of the rim's widest point above the flat back

# Half cross-section as (inset from rim, z). The first and last points sit on
# the tag's centre axis, (0.0, 4.17) is the widest point of the rim.
AIRTAG_PROFILE: Tuple[Tuple[float, float], ...] = (
    (15.935, 7.98), (15.93, 7.97), (15.10, 7.96), (14.27, 7.95), (13.44, 7.95),
    (12.61, 7.92), (11.78, 7.89), (10.96, 7.85), (10.13, 7.81), (9.30, 7.75),
    (8.48, 7.69), (7.65, 7.62), (6.83, 7.54), (6.00, 7.44), (5.18, 7.33),
    (4.36, 7.20), (3.55, 7.03), (2.75, 6.82), (1.97, 6.55), (1.23, 6.18),
    (0.58, 5.67), (0.13, 4.98), (0.00, 4.17), (0.24, 3.38), (0.77, 2.75),
    (1.46, 2.29), (3.21, 2.29), (3.21, 0.88), (4.18, 0.75), (5.16, 0.63),
    (6.13, 0.52), (7.11, 0.42), (8.09, 0.33), (9.07, 0.26), (10.04, 0.19),
    (11.02, 0.13), (12.00, 0.08), (12.98, 0.05), (13.97, 0.02), (14.95, 0.01),
    (15.93, 0.00),
)

FILLER_EXTRA = 0.01  # filler overlaps the shifted profile by this much
CUT_EPSILON = 0.01  # cutter overshoot so booleans don't leave skins
LAYOUT_SPACING = 40.0  # X offset between sibling parts


class GeometryError(ValueError):
    """Raised when parameters describe geometry that can't be built."""


class RecipeBuildError(RuntimeError):
    """The CAD kernel failed while building one feature of a product."""

    def __init__(self, product: str, feature: str, reason):
        self.product = product
        self.feature = feature
        self.reason = reason
        super().__init__(f"{product}: building {feature} failed: {reason}")


@dataclass(frozen=True)
class TagProfile:
    points: Tuple[Tuple[float, float], ...]
    radius: float
    thickness: float
    widest_point_z: float

    @property
    def max_inset(self) -> float:
        return self.points[0][0]

    def validate(self) -> "TagProfile":
        if len(self.points) < 2:
            raise GeometryError(f"profile needs at least 2 points, got {len(self.points)}")
        if self.radius <= 0 or self.thickness <= 0:
            raise GeometryError(
                f"profile radius and thickness must be positive "
                f"(radius={self.radius}, thickness={self.thickness})"
            )
        for inset, z in self.points:
            if inset < 0 or inset > self.radius:
                raise GeometryError(f"profile point ({inset}, {z}) lies outside the tag radius {self.radius}")
            if z < 0 or z > self.thickness:
                raise GeometryError(f"profile point ({inset}, {z}) lies outside [0, {self.thickness}]")
        if not 0 <= self.widest_point_z <= self.thickness:
            raise GeometryError(f"widest point z={self.widest_point_z} outside [0, {self.thickness}]")
        return self


DEFAULT_PROFILE = TagProfile(
    points=AIRTAG_PROFILE,
    radius=AIRTAG_RADIUS,
    thickness=AIRTAG_THICKNESS,
    widest_point_z=AIRTAG_WIDEST_POINT_Z,
)


def cross_section(points: Sequence[Tuple[float, float]], filler: Sequence[Tuple[float, float]]) -> cq.Sketch:
    """Profile and filler fused into one planar region before revolving."""
    return cq.Sketch().polygon(list(points)).polygon(list(filler), mode="a").clean()


def _revolve_region(section: cq.Sketch) -> cq.Workplane:
    # XZ workplane: local x is the radial axis, local y is global Z
    return cq.Workplane("XZ").placeSketch(section).revolve(360.0, (0, 0, 0), (0, 1, 0))


def filler_width(tolerance: float) -> float:
    return tolerance + FILLER_EXTRA


def revolve_profile(profile: TagProfile, tolerance: float) -> cq.Workplane:
    """Revolve a tag cross-section into a solid cavity.

    The profile is shifted away from the axis by ``radius + tolerance`` so the
    rim ends up at ``radius + tolerance``. Shifting instead of offsetting
    leaves a hole of width ``tolerance`` around the axis, which is closed by a
    filler rectangle slightly wider than the hole. The result spans
    ``z = 0 .. profile.thickness``.
    """
    profile.validate()
    if tolerance < 0:
        raise GeometryError(f"tolerance must be >= 0, got {tolerance}")

    shift = -(profile.radius + tolerance)
    shifted = [(inset + shift, z) for inset, z in profile.points]

    width = filler_width(tolerance)
    filler = [(-width, 0.0), (0.0, 0.0), (0.0, profile.thickness), (-width, profile.thickness)]

    logger.debug(f"Revolving {len(shifted)}-point profile, tolerance={tolerance}, filler width={width:.3f}")
    return _revolve_region(cross_section(shifted, filler))


def envelope(tolerance: float, profile: TagProfile = DEFAULT_PROFILE, flipped: bool = False) -> cq.Workplane:
    """Tag cavity, optionally flipped upside down (z -> -z) for lid halves."""
    shape = revolve_profile(profile, tolerance)
    if flipped:
        shape = shape.rotate((0, 0, 0), (1, 0, 0), 180)
    return shape


def polar_points(radius: float, count: int = 3, start: float = 0.0) -> List[Tuple[float, float]]:
    """XY centres spread evenly around the Z axis, first one at ``start`` degrees."""
    angles = [math.radians(start + i * 360.0 / count) for i in range(count)]
    return [(radius * math.cos(a), radius * math.sin(a)) for a in angles]


def repeat_around_z(shape: cq.Workplane, count: int = 3, start: float = 0.0) -> cq.Workplane:
    """Union ``count`` copies of ``shape`` rotated evenly about Z."""
    if count < 1:
        raise GeometryError(f"repeat count must be >= 1, got {count}")
    result: Optional[cq.Workplane] = None
    for i in range(count):
        copy = shape.rotate((0, 0, 0), (0, 0, 1), start + i * 360.0 / count)
        result = copy if result is None else result.union(copy)
    return result


def lay_out(parts: Iterable[cq.Workplane], spacing: float = LAYOUT_SPACING) -> cq.Workplane:
    """Place parts side by side along X so they don't overlap in a preview or on the bed."""
    result: Optional[cq.Workplane] = None
    for i, part in enumerate(parts):
        placed = part.translate((i * spacing, 0, 0))
        result = placed if result is None else result.union(placed)
    if result is None:
        raise GeometryError("nothing to lay out")
    return result


def checked(product: str, feature: str, build: Callable[..., cq.Workplane], *args, **kwargs) -> cq.Workplane:
    """Run one construction step, turning kernel failures into RecipeBuildError."""
    try:
        result = build(*args, **kwargs)
    except GeometryError:
        raise
    except Exception as e:
        raise RecipeBuildError(product, feature, e) from e

    shape = result.val()
    if not isinstance(shape, cq.Shape) or not shape.isValid():
        raise RecipeBuildError(product, feature, "kernel returned an invalid solid")
    logger.debug(f"{product}: built {feature}")
    return result
