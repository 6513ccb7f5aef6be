"""Voxel casting of 3D line segments using Numba-accelerated numpy code.

Three algorithms compute the ordered voxel indices crossed by the segment from
``ray_start`` to ``ray_end`` on a grid of cubic voxels with edge ``step_size``:

- ``voxel_casting``: Amanatides-Woo style parametric traversal ("A Fast Voxel
  Traversal Algorithm for Ray Tracing", 1987). Kept as a reference oracle; its
  loop is capped because rounding can carry it past the end voxel.
- ``voxel_casting_bresenham``: 3D Bresenham rasterization with per-axis integer
  error terms (http://members.chello.at/easyfilter/bresenham.html).
- ``voxel_casting_dda``: integer DDA with a shared threshold, several axes may
  step in the same iteration. 1.7~2 times faster than ``voxel_casting``.

All paths are int64 numpy arrays of shape [num_voxels, 3].

Limitations:
- Only works on CPU (Numba does not support GPU).
- Voxel indices are limited to +/- (2**31 - 1).
"""

import logging
from typing import Optional

import numpy as np
from numba import njit

from .common import (
    DEFAULT_NP_INT_DTYPE,
    IterationLimitError,
    Point3,
    as_point3,
    check_end_voxel,
    check_max_steps,
    check_step_size,
    empty_path,
    get_voxel_index,
    has_nan,
)

logger = logging.getLogger(__name__)

TRAVERSAL_OK = 0
TRAVERSAL_LIMIT_EXCEEDED = 1

# =======================
# NUMBA-ACCELERATED CORE
# =======================


@njit
def _same_voxel(a: np.ndarray, b: np.ndarray) -> bool:
    return a[0] == b[0] and a[1] == b[1] and a[2] == b[2]


@njit
def _next_axis(t_max: np.ndarray) -> int:
    """Axis whose voxel boundary is crossed next.

    Ties never go to x; between y and z they go to z.
    """
    if t_max[0] < t_max[1]:
        if t_max[0] < t_max[2]:
            return 0
        return 2
    if t_max[1] < t_max[2]:
        return 1
    return 2


@njit
def voxel_casting_numba_core(
    ray_start: np.ndarray,
    ray_end: np.ndarray,
    start_voxel: np.ndarray,
    end_voxel: np.ndarray,
    step_size: float,
    max_steps: int,
):
    """
    Numba-accelerated parametric voxel traversal for a single segment.
    Returns the traversed voxel indices (shape: [num_steps, 3]) and a status
    flag, TRAVERSAL_LIMIT_EXCEEDED if the end voxel was not reached within
    max_steps iterations.

    Args:
        ray_start: Segment start point [3]
        ray_end: Segment end point [3]
        start_voxel: Voxel index of ray_start [3]
        end_voxel: Voxel index of ray_end [3]
        step_size: Edge length of a voxel
        max_steps: Maximum number of boundary crossings
    """
    traversed = np.empty((max_steps + 2, 3), dtype=DEFAULT_NP_INT_DTYPE)
    current_voxel = start_voxel.copy()
    traversed[0, :] = current_voxel
    steps = 1
    if _same_voxel(start_voxel, end_voxel):
        return traversed[:steps], TRAVERSAL_OK

    ray = ray_end - ray_start
    step = np.empty(3, dtype=DEFAULT_NP_INT_DTYPE)
    t_max = np.empty(3, dtype=np.float64)
    t_delta = np.empty(3, dtype=np.float64)
    for i in range(3):
        step[i] = 1 if ray[i] >= 0.0 else -1
        if start_voxel[i] != end_voxel[i]:
            # ray[i] cannot be zero here, the endpoints lie in different slabs
            next_voxel_boundary = (current_voxel[i] + step[i]) * step_size
            t_max[i] = (next_voxel_boundary - ray_start[i]) / ray[i]
            t_delta[i] = step_size / ray[i] * step[i]
        else:
            t_max[i] = np.inf
            t_delta[i] = np.inf

    # for negative rays the boundary above is one voxel further away, so the
    # current voxel is moved back once before walking
    neg_ray = False
    for i in range(3):
        if current_voxel[i] != end_voxel[i] and ray[i] < 0.0:
            current_voxel[i] -= 1
            neg_ray = True
    if neg_ray:
        traversed[steps, :] = current_voxel
        steps += 1

    iterations = 0
    while not _same_voxel(current_voxel, end_voxel):
        if iterations >= max_steps:
            return traversed[:steps], TRAVERSAL_LIMIT_EXCEEDED
        axis = _next_axis(t_max)
        current_voxel[axis] += step[axis]
        t_max[axis] += t_delta[axis]
        traversed[steps, :] = current_voxel
        steps += 1
        iterations += 1
    return traversed[:steps], TRAVERSAL_OK


@njit
def voxel_casting_bresenham_numba_core(
    start_voxel: np.ndarray, end_voxel: np.ndarray
) -> np.ndarray:
    """
    Numba-accelerated 3D Bresenham traversal between two voxels.
    Returns exactly max(|dx|, |dy|, |dz|) + 1 voxel indices (shape: [n, 3]).
    """
    x0, y0, z0 = start_voxel[0], start_voxel[1], start_voxel[2]
    x1, y1, z1 = end_voxel[0], end_voxel[1], end_voxel[2]
    dx, sx = abs(x1 - x0), 1 if x0 < x1 else -1
    dy, sy = abs(y1 - y0), 1 if y0 < y1 else -1
    dz, sz = abs(z1 - z0), 1 if z0 < z1 else -1
    dm = max(dx, dy, dz)
    # error offsets
    ex = ey = ez = dm >> 1

    traversed = np.empty((dm + 1, 3), dtype=DEFAULT_NP_INT_DTYPE)
    for i in range(dm + 1):
        traversed[i, 0] = x0
        traversed[i, 1] = y0
        traversed[i, 2] = z0
        if i == dm:
            break
        ex -= dx
        if ex < 0:
            ex += dm
            x0 += sx
        ey -= dy
        if ey < 0:
            ey += dm
            y0 += sy
        ez -= dz
        if ez < 0:
            ez += dm
            z0 += sz
    return traversed


@njit
def voxel_casting_dda_numba_core(
    start_voxel: np.ndarray, end_voxel: np.ndarray
) -> np.ndarray:
    """
    Numba-accelerated integer DDA traversal between two voxels.
    Returns exactly max_delta + 1 voxel indices (shape: [n, 3]).
    """
    current_voxel = start_voxel.copy()
    delta = end_voxel - start_voxel
    step = np.empty(3, dtype=DEFAULT_NP_INT_DTYPE)
    error = np.zeros(3, dtype=DEFAULT_NP_INT_DTYPE)
    for i in range(3):
        step[i] = 1 if delta[i] >= 0 else -1
        delta[i] = abs(delta[i])
    max_delta = max(delta[0], delta[1], delta[2])

    traversed = np.empty((max_delta + 1, 3), dtype=DEFAULT_NP_INT_DTYPE)
    for n in range(max_delta):
        traversed[n, :] = current_voxel
        # step every axis whose error reaches half a dominant step
        for i in range(3):
            error[i] += delta[i]
            if (error[i] << 1) >= max_delta:
                current_voxel[i] += step[i]
                error[i] -= max_delta
    traversed[max_delta, :] = current_voxel
    return traversed


# =======================
# WRAPPERS FOR POINT INPUT
# =======================


def voxel_casting(
    ray_start: Point3,
    ray_end: Point3,
    step_size: float,
    max_steps: Optional[int] = None,
) -> np.ndarray:
    """
    Parametric voxel traversal of the segment from ray_start to ray_end.

    Not recommended outside of tests: with end points on voxel boundaries,
    rounding in the accumulated boundary distances can step an axis past the
    end voxel, after which the walk never reaches it. The walk is therefore
    capped and raises IterationLimitError instead of looping.

    Args:
        ray_start: Segment start point [3]
        ray_end: Segment end point [3]
        step_size: Edge length of a voxel
        max_steps: Maximum number of boundary crossings. Defaults to the
            Manhattan distance between the start and end voxels.

    Returns:
        Traversed voxel indices [num_voxels, 3]; empty if any coordinate is NaN.
    """
    step_size = check_step_size(step_size)
    max_steps = check_max_steps(max_steps)
    ray_start, ray_end = as_point3(ray_start), as_point3(ray_end)
    if has_nan(ray_start, ray_end):
        logger.debug("NaN in ray %s -> %s, skipped", ray_start, ray_end)
        return empty_path()

    start_voxel = get_voxel_index(ray_start, step_size)
    end_voxel = get_voxel_index(ray_end, step_size)
    if max_steps is None:
        max_steps = int(np.abs(end_voxel - start_voxel).sum())

    traversed, status = voxel_casting_numba_core(
        ray_start, ray_end, start_voxel, end_voxel, step_size, max_steps
    )
    if status == TRAVERSAL_LIMIT_EXCEEDED:
        logger.error(
            "voxel_casting exceeded %d steps from %s towards %s",
            max_steps,
            start_voxel.tolist(),
            end_voxel.tolist(),
        )
        raise IterationLimitError(
            f"voxel_casting did not reach {end_voxel.tolist()} from "
            f"{start_voxel.tolist()} within {max_steps} steps"
        )
    check_end_voxel(traversed, end_voxel, "voxel_casting")
    return traversed


def voxel_casting_bresenham(
    ray_start: Point3, ray_end: Point3, step_size: float
) -> np.ndarray:
    """
    3D Bresenham voxel traversal of the segment from ray_start to ray_end.

    Args:
        ray_start: Segment start point [3]
        ray_end: Segment end point [3]
        step_size: Edge length of a voxel

    Returns:
        Traversed voxel indices [max_delta + 1, 3]; empty if any coordinate is NaN.
    """
    step_size = check_step_size(step_size)
    ray_start, ray_end = as_point3(ray_start), as_point3(ray_end)
    if has_nan(ray_start, ray_end):
        logger.debug("NaN in ray %s -> %s, skipped", ray_start, ray_end)
        return empty_path()

    end_voxel = get_voxel_index(ray_end, step_size)
    traversed = voxel_casting_bresenham_numba_core(
        get_voxel_index(ray_start, step_size), end_voxel
    )
    check_end_voxel(traversed, end_voxel, "voxel_casting_bresenham")
    return traversed


def voxel_casting_dda(
    ray_start: Point3, ray_end: Point3, step_size: float
) -> np.ndarray:
    """
    Integer DDA voxel traversal of the segment from ray_start to ray_end.

    Args:
        ray_start: Segment start point [3]
        ray_end: Segment end point [3]
        step_size: Edge length of a voxel

    Returns:
        Traversed voxel indices [max_delta + 1, 3]; empty if any coordinate is NaN.
    """
    step_size = check_step_size(step_size)
    ray_start, ray_end = as_point3(ray_start), as_point3(ray_end)
    if has_nan(ray_start, ray_end):
        logger.debug("NaN in ray %s -> %s, skipped", ray_start, ray_end)
        return empty_path()

    end_voxel = get_voxel_index(ray_end, step_size)
    traversed = voxel_casting_dda_numba_core(
        get_voxel_index(ray_start, step_size), end_voxel
    )
    check_end_voxel(traversed, end_voxel, "voxel_casting_dda")
    return traversed
