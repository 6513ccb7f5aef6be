"""Shared types, input validation and errors for voxel casting."""

import logging
from typing import Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_NP_INT_DTYPE = np.int64
DEFAULT_NP_FLOAT_DTYPE = np.float64

# indices beyond this are rejected before any delta is computed
MAX_ABS_VOXEL_INDEX = 2**31 - 1

Point3 = Union[Sequence[float], np.ndarray]


class VoxelCastingError(RuntimeError):
    """Internal consistency fault of a traversal algorithm."""


class PostconditionError(VoxelCastingError):
    """The last voxel of a path differs from the voxel of the ray end."""


class IterationLimitError(VoxelCastingError):
    """The parametric traversal did not reach the end voxel within its cap."""


def as_point3(point: Point3) -> np.ndarray:
    """Convert a point to a float64 array of shape [3]."""
    arr = np.asarray(point, dtype=DEFAULT_NP_FLOAT_DTYPE)
    if arr.ndim == 2 and arr.shape[0] == 1:
        arr = arr[0]  # Extract [3] from [1, 3]
    if arr.shape != (3,):
        raise ValueError(f"point must have shape (3,), got {arr.shape}")
    return arr


def check_step_size(step_size: float) -> float:
    """Reject voxel sizes that are not positive finite numbers."""
    step_size = float(step_size)
    if not np.isfinite(step_size) or step_size <= 0.0:
        raise ValueError(f"step_size must be positive and finite, got {step_size}")
    return step_size


def check_max_steps(max_steps: Optional[int]) -> Optional[int]:
    """Reject negative caps on the parametric walk; None keeps the default."""
    if max_steps is None:
        return None
    max_steps = int(max_steps)
    if max_steps < 0:
        raise ValueError(f"max_steps must be non-negative, got {max_steps}")
    return max_steps


def has_nan(*points: np.ndarray) -> bool:
    return any(bool(np.isnan(p).any()) for p in points)


def get_voxel_index(point: Point3, step_size: float) -> np.ndarray:
    """Voxel index of a point, ``floor(point / step_size)`` per axis.

    Args:
        point: Continuous coordinate [3].
        step_size: Edge length of a voxel.

    Returns:
        np.ndarray: Integer voxel index [3].
    """
    scaled = np.floor(as_point3(point) / step_size)
    if not np.all(np.abs(scaled) <= MAX_ABS_VOXEL_INDEX):
        raise ValueError(
            f"voxel index {scaled} is outside +/-{MAX_ABS_VOXEL_INDEX}"
        )
    return scaled.astype(DEFAULT_NP_INT_DTYPE)


def empty_path() -> np.ndarray:
    return np.empty((0, 3), dtype=DEFAULT_NP_INT_DTYPE)


def check_end_voxel(path: np.ndarray, end_voxel: np.ndarray, name: str) -> None:
    """Verify that a traversal ended in the voxel of the ray end.

    A mismatch means the traversal arithmetic is wrong for this input, so it is
    raised as :class:`PostconditionError` rather than reported as bad input.
    """
    if len(path) == 0 or not np.array_equal(path[-1], end_voxel):
        last = path[-1].tolist() if len(path) else None
        logger.error(
            "%s ended at %s instead of %s", name, last, end_voxel.tolist()
        )
        raise PostconditionError(
            f"{name} ended at {last} != end voxel {end_voxel.tolist()}"
        )
