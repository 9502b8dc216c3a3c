"""Basic AirTag holder.

A square block with the lower half of the tag sunk into it: the tag's
widest rim sits flush with the top face and the back rests on a thin floor.
"""
import logging

import cadquery as cq

from airtag_common import (
    DEFAULT_PROFILE,
    GeometryError,
    TagProfile,
    checked,
    envelope,
)

logger = logging.getLogger(__name__)

PRODUCT = "basic_shape"

BOX_MARGIN = 2.0  # wall around the tag rim
BOX_TOLERANCE = 0.15  # radial clearance of the pocket
FLOOR = 0.8  # material under the tag's widest point


def box_size(profile: TagProfile = DEFAULT_PROFILE, margin: float = BOX_MARGIN, floor: float = FLOOR):
    if margin <= 0 or floor <= 0:
        raise GeometryError(f"margin and floor must be positive (margin={margin}, floor={floor})")
    side = (profile.radius + margin) * 2
    return side, side, profile.widest_point_z + floor


def blank(size) -> cq.Workplane:
    # centred on XY, bottom face at z=0
    return cq.Workplane("XY").box(*size, centered=(True, True, False))


def build_shell(
    product: str = PRODUCT,
    profile: TagProfile = DEFAULT_PROFILE,
    margin: float = BOX_MARGIN,
    tolerance: float = BOX_TOLERANCE,
    floor: float = FLOOR,
) -> cq.Workplane:
    size = box_size(profile, margin, floor)
    cavity = checked(product, "cavity", envelope, tolerance, profile)
    cavity = cavity.translate((0, 0, size[2] - profile.widest_point_z))
    return checked(product, "pocket", blank(size).cut, cavity)


def build(**params) -> cq.Workplane:
    logger.debug(f"Building {PRODUCT}")
    return build_shell(PRODUCT, **params)
