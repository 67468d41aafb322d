"""3D geometry utilities: yaw rotations, look-at orientation, TRS matrices.

Conventions: right-handed, +Y up, cameras look down their local -Z axis
(the glTF / OpenGL convention used by trimesh and pyrender).
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial.transform import Rotation

logger = logging.getLogger(__name__)

WORLD_UP = np.array([0.0, 1.0, 0.0])

# Directions shorter than this are treated as zero.
_EPS = 1e-9


def as_vec3(value) -> np.ndarray:
    """Coerce a 3-sequence into a float64 (3,) array."""
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vec.shape}")
    return vec


def yaw_rotation(degrees: float) -> Rotation:
    """Rotation about world +Y. Any real angle, taken modulo 360."""
    return Rotation.from_euler("y", float(degrees) % 360.0, degrees=True)


def euler_rotation(euler_degrees) -> Rotation:
    """Rotation from editor-style (x, y, z) Euler angles in degrees.

    Angles follow the left-handed, +Z-forward convention of game editors:
    positive x pitches the view down, positive y turns it right, and the
    rotation is applied Z, X, then Y. Mirroring the Z axis into this frame
    flips the sense of the x and y rotations.
    """
    x, y, z = as_vec3(euler_degrees)
    return Rotation.from_euler("YXZ", [-y, -x, z], degrees=True)


def look_at_rotation(eye, target, up=WORLD_UP) -> Rotation | None:
    """Orientation whose -Z axis points from ``eye`` to ``target``.

    Returns None when eye and target coincide (no defined direction).
    If the view direction is parallel to ``up``, world -Z is used as the
    up hint instead.
    """
    eye = as_vec3(eye)
    forward = as_vec3(target) - eye
    length = np.linalg.norm(forward)
    if length < _EPS:
        return None
    forward /= length

    z_axis = -forward
    x_axis = np.cross(as_vec3(up), z_axis)
    if np.linalg.norm(x_axis) < _EPS:
        x_axis = np.cross(np.array([0.0, 0.0, -1.0]), z_axis)
    x_axis /= np.linalg.norm(x_axis)
    y_axis = np.cross(z_axis, x_axis)

    return Rotation.from_matrix(np.column_stack([x_axis, y_axis, z_axis]))


def compose_matrix(position, rotation: Rotation, scale=(1.0, 1.0, 1.0)) -> np.ndarray:
    """Build a 4x4 TRS matrix."""
    matrix = np.eye(4)
    matrix[:3, :3] = rotation.as_matrix() * as_vec3(scale)[np.newaxis, :]
    matrix[:3, 3] = as_vec3(position)
    return matrix
