"""Test for handing traversal paths to torch."""

import numpy as np
import pytest
import torch

from voxel_casting import voxel_casting_dda
from voxel_casting.ray_casting import (
    flatten_paths,
    get_voxel_centers,
    pad_paths,
    voxel_distance_to_point,
)


def test_get_voxel_centers():
    """Test voxel index to center conversion."""
    centers = get_voxel_centers(np.array([[0, 0, 0], [1, 2, -3]]), 0.5)
    expected = torch.tensor([[0.25, 0.25, 0.25], [0.75, 1.25, -1.25]])
    assert torch.allclose(centers, expected), f"Expected {expected}, got {centers}"
    assert centers.dtype == torch.float32


def test_get_voxel_centers_rejects_bad_step():
    with pytest.raises(ValueError):
        get_voxel_centers(np.zeros((1, 3), dtype=np.int64), 0.0)


def test_voxel_distance_to_point():
    """Centers along a path are at increasing distance from the origin."""
    path = voxel_casting_dda((0.5, 0.5, 0.5), (3.5, 0.5, 0.5), 1.0)
    centers = get_voxel_centers(path, 1.0)
    distances = voxel_distance_to_point(centers, torch.tensor([[0.5, 0.5, 0.5]]))
    assert torch.allclose(distances, torch.tensor([0.0, 1.0, 2.0, 3.0]))


def test_pad_paths():
    """Test padding with an empty path in the batch."""
    paths = [
        np.array([[0, 0, 0], [1, 0, 0]]),
        np.array([[0, 0, 0], [0, 1, 0], [0, 2, 0], [0, 3, 0]]),
        np.empty((0, 3), dtype=np.int64),
    ]
    padded, lengths = pad_paths(paths)
    assert padded.shape == (3, 4, 3)
    assert torch.equal(lengths, torch.tensor([2, 4, 0]))
    assert torch.equal(padded[0, :2], torch.tensor([[0, 0, 0], [1, 0, 0]]))
    assert (padded[0, 2:] == -1).all()
    assert (padded[2] == -1).all()


def test_pad_paths_without_empty_rays():
    paths = [np.array([[0, 0, 0]]), np.array([[0, 0, 0], [1, 1, 1]])]
    padded, lengths = pad_paths(paths, padding_value=7)
    assert padded.shape == (2, 2, 3)
    assert torch.equal(padded[0, 1], torch.tensor([7, 7, 7]))
    assert torch.equal(lengths, torch.tensor([1, 2]))


def test_pad_paths_empty_list():
    padded, lengths = pad_paths([])
    assert padded.shape == (0, 0, 3)
    assert lengths.numel() == 0


def test_flatten_paths():
    paths = [
        np.array([[0, 0, 0], [1, 0, 0]]),
        np.empty((0, 3), dtype=np.int64),
        np.array([[5, 5, 5], [5, 6, 5], [5, 7, 5]]),
    ]
    flat, ray_starts, ray_lengths = flatten_paths(paths)
    assert flat.shape == (5, 3)
    assert torch.equal(ray_starts, torch.tensor([0, 2, 2]))
    assert torch.equal(ray_lengths, torch.tensor([2, 0, 3]))
    assert torch.equal(flat[ray_starts[2]], torch.tensor([5, 5, 5]))


def test_flatten_paths_empty_list():
    flat, ray_starts, ray_lengths = flatten_paths([])
    assert flat.shape == (0, 3)
    assert ray_starts.numel() == 0 and ray_lengths.numel() == 0


if __name__ == "__main__":
    test_get_voxel_centers()
    test_pad_paths()
    print("All tests passed.")
