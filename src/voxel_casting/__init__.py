"""voxel_casting - voxel traversal of 3D line segments for occupancy mapping."""

from .common import (
    IterationLimitError,
    PostconditionError,
    VoxelCastingError,
    get_voxel_index,
)
from .config import VoxelCastingConfig, load_config
from .ray_casting import (
    flatten_paths,
    get_voxel_centers,
    pad_paths,
    voxel_distance_to_point,
)
from .traversal import (
    TraversalMethod,
    VoxelCaster,
    get_traversal,
    voxel_traversal,
    voxel_traversal_batch,
)
from .voxel_casting_numba import (
    voxel_casting,
    voxel_casting_bresenham,
    voxel_casting_dda,
)

__all__ = [
    "IterationLimitError",
    "PostconditionError",
    "VoxelCastingError",
    "get_voxel_index",
    "VoxelCastingConfig",
    "load_config",
    "flatten_paths",
    "get_voxel_centers",
    "pad_paths",
    "voxel_distance_to_point",
    "TraversalMethod",
    "VoxelCaster",
    "get_traversal",
    "voxel_traversal",
    "voxel_traversal_batch",
    "voxel_casting",
    "voxel_casting_bresenham",
    "voxel_casting_dda",
]
