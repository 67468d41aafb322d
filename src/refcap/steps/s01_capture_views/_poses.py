"""Derive the four capture poses from the reference camera pose."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from refcap.utils.geometry import WORLD_UP, as_vec3, look_at_rotation, yaw_rotation
from .config import DirectionEntry

WORLD_ORIGIN = np.zeros(3)


@dataclass(frozen=True)
class CapturePose:
    label: str
    position: np.ndarray
    rotation: Rotation


def derive_poses(
    reference_position,
    reference_rotation: Rotation,
    target_center,
    directions: Sequence[DirectionEntry],
) -> list[CapturePose]:
    """One pose per direction, in the given order.

    The reference position is treated as an offset from the world origin and
    orbited about world up, then re-centred on ``target_center``. The camera
    is re-aimed at the target; when it sits exactly on the target the
    yaw-composed reference rotation is kept.
    """
    # Orbit offset is measured from the world origin, not from the target.
    offset = as_vec3(reference_position) - WORLD_ORIGIN
    center = as_vec3(target_center)

    poses = []
    for direction in directions:
        yaw = yaw_rotation(direction.yaw_degrees)
        position = center + yaw.apply(offset)
        rotation = reference_rotation * yaw
        aimed = look_at_rotation(position, center, WORLD_UP)
        poses.append(CapturePose(
            label=direction.label,
            position=position,
            rotation=aimed if aimed is not None else rotation,
        ))
    return poses
