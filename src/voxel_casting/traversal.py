"""Selection of a voxel casting algorithm by name."""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from .common import Point3, as_point3
from .config import VoxelCastingConfig
from .voxel_casting_numba import (
    voxel_casting,
    voxel_casting_bresenham,
    voxel_casting_dda,
)

logger = logging.getLogger(__name__)

Traversal = Callable[[Point3, Point3, float], np.ndarray]


class TraversalMethod(str, Enum):
    PARAMETRIC = "parametric"
    BRESENHAM = "bresenham"
    DDA = "dda"


_TRAVERSALS: Dict[TraversalMethod, Traversal] = {
    TraversalMethod.PARAMETRIC: voxel_casting,
    TraversalMethod.BRESENHAM: voxel_casting_bresenham,
    TraversalMethod.DDA: voxel_casting_dda,
}


def get_traversal(method: Union[str, TraversalMethod]) -> Traversal:
    """Return the traversal function implementing ``method``."""
    try:
        return _TRAVERSALS[TraversalMethod(method)]
    except ValueError:
        raise ValueError(
            f"Unsupported traversal method: {method}. "
            f"Choose one of {[m.value for m in TraversalMethod]}."
        ) from None


def voxel_traversal(
    ray_start: Point3,
    ray_end: Point3,
    step_size: float,
    method: Union[str, TraversalMethod] = TraversalMethod.DDA,
) -> np.ndarray:
    """
    Unified interface for voxel casting of a single segment.

    Args:
        ray_start: Segment start point [3]
        ray_end: Segment end point [3]
        step_size: Edge length of a voxel
        method: "parametric", "bresenham" or "dda"

    Returns:
        Traversed voxel indices [num_voxels, 3].
    """
    return get_traversal(method)(ray_start, ray_end, step_size)


def _as_ray_ends(ray_ends: np.ndarray) -> np.ndarray:
    ray_ends = np.asarray(ray_ends, dtype=np.float64)
    # Handle input shapes
    if ray_ends.ndim == 1:
        ray_ends = np.expand_dims(ray_ends, 0)
    if ray_ends.ndim != 2 or ray_ends.shape[-1] != 3:
        raise ValueError(f"ray_ends must have shape [N, 3], got {ray_ends.shape}")
    return ray_ends


def voxel_traversal_batch(
    ray_origin: Point3,
    ray_ends: np.ndarray,
    step_size: float,
    method: Union[str, TraversalMethod] = TraversalMethod.DDA,
) -> List[np.ndarray]:
    """
    Voxel casting for rays sharing one origin, e.g. the returns of one scan.

    Args:
        ray_origin: Sensor origin [3] or [1, 3]
        ray_ends: Ray end points [N, 3]
        step_size: Edge length of a voxel
        method: "parametric", "bresenham" or "dda"

    Returns:
        List of numpy arrays (each [num_voxels, 3]) for each ray.
    """
    traversal = get_traversal(method)
    ray_origin = as_point3(ray_origin)
    ray_ends = _as_ray_ends(ray_ends)
    return [traversal(ray_origin, ray_end, step_size) for ray_end in ray_ends]


class VoxelCaster:
    """Voxel casting with a fixed method and voxel size taken from a config.

    Args:
        config: Casting parameters; defaults to ``VoxelCastingConfig()``.
    """

    def __init__(self, config: Optional[VoxelCastingConfig] = None):
        self.config = config if config is not None else VoxelCastingConfig()
        self.method = TraversalMethod(self.config.method)
        self.step_size = self.config.step_size
        if self.method is TraversalMethod.PARAMETRIC:
            logger.warning(
                "parametric voxel casting is meant as a test oracle; "
                "prefer 'dda' for mapping"
            )

    def cast(self, ray_start: Point3, ray_end: Point3) -> np.ndarray:
        if self.method is TraversalMethod.PARAMETRIC:
            return voxel_casting(
                ray_start, ray_end, self.step_size, self.config.max_steps
            )
        return voxel_traversal(ray_start, ray_end, self.step_size, self.method)

    def cast_batch(self, ray_origin: Point3, ray_ends: np.ndarray) -> List[np.ndarray]:
        ray_origin = as_point3(ray_origin)
        ray_ends = _as_ray_ends(ray_ends)
        return [self.cast(ray_origin, ray_end) for ray_end in ray_ends]
