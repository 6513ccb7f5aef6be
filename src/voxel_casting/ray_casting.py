"""Hand traversal paths over to torch-based ray casting code."""

from typing import Union

import numpy as np
import torch
from einops import rearrange
from torch.nn.utils.rnn import pad_sequence

from .common import check_step_size


def get_voxel_centers(
    voxel_indices: Union[np.ndarray, torch.Tensor], step_size: float
) -> torch.Tensor:
    """
    Convert voxel indices to world coordinates of voxel centers.

    Args:
        voxel_indices: Voxel indices. Shape: [N, 3]
        step_size: Edge length of a voxel

    Returns:
        World coordinates of voxel centers (float32). Shape: [N, 3]
    """
    step_size = check_step_size(step_size)
    indices = torch.as_tensor(voxel_indices)
    return (indices.float() + 0.5) * step_size


def voxel_distance_to_point(
    voxel_centers: torch.Tensor,
    point: torch.Tensor,
) -> torch.Tensor:
    """Calculate the distance from each voxel center to a given point.

    Args:
        voxel_centers (torch.Tensor): Voxel centers, shape [N, 3].
        point (torch.Tensor): Point to calculate distances to, shape [3] or [1, 3].

    Returns:
        torch.Tensor: Distances from each voxel center to the point, shape [N].
    """
    assert voxel_centers.ndim == 2 and voxel_centers.shape[-1] == 3, (
        "voxel_centers must have shape [N, 3]"
    )
    if point.ndim == 2:
        point = point.squeeze(0)  # shape: [3]

    point_expanded = rearrange(point.to(voxel_centers.dtype), "c -> 1 c")
    return torch.norm(voxel_centers - point_expanded, dim=-1, keepdim=False)


def _path_tensors(paths: list[np.ndarray]) -> list[torch.Tensor]:
    return [
        torch.as_tensor(np.asarray(path).reshape(-1, 3), dtype=torch.long)
        for path in paths
    ]


def pad_paths(
    paths: list[np.ndarray], padding_value: int = -1
) -> tuple[torch.Tensor, torch.Tensor]:
    """Convert a list of variable-length paths to one padded tensor.

    Args:
        paths: Voxel index arrays, one [n_i, 3] array per ray.
        padding_value: Index written into the padded rows.

    Returns:
        tuple containing:
        - padded_paths: Padded voxel indices [num_rays, max_length, 3]
        - ray_lengths: Actual length of each path [num_rays]
    """
    path_tensors = _path_tensors(paths)
    ray_lengths = torch.tensor([len(p) for p in path_tensors], dtype=torch.long)

    if path_tensors and all(len(p) > 0 for p in path_tensors):
        padded_paths = pad_sequence(
            path_tensors, batch_first=True, padding_value=padding_value
        )
    else:
        # No rays, or some rays are empty (NaN end points)
        max_length = max((len(p) for p in path_tensors), default=0)
        padded_paths = torch.full(
            (len(path_tensors), max_length, 3), padding_value, dtype=torch.long
        )
        for i, path in enumerate(path_tensors):
            padded_paths[i, : len(path)] = path

    return padded_paths, ray_lengths


def flatten_paths(
    paths: list[np.ndarray],
) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Concatenate paths into one flat index tensor with per-ray offsets.

    Returns:
        - flat_paths: Concatenated voxel indices [total_voxels, 3]
        - ray_starts: Start row of each path [num_rays]
        - ray_lengths: Length of each path [num_rays]
    """
    path_tensors = _path_tensors(paths)
    ray_lengths = torch.tensor([len(p) for p in path_tensors], dtype=torch.long)
    flat_paths = (
        torch.cat(path_tensors, dim=0)
        if path_tensors
        else torch.empty(0, 3, dtype=torch.long)
    )
    ray_starts = torch.cumsum(ray_lengths, dim=0) - ray_lengths
    return flat_paths, ray_starts, ray_lengths
