"""
Configuration for voxel casting.

Provides a typed pydantic model and YAML loader with sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError


class VoxelCastingConfig(BaseModel):
    method: Literal["parametric", "bresenham", "dda"] = Field(
        default="dda",
        description="Traversal algorithm; 'parametric' is a reference oracle",
    )
    step_size: float = Field(default=0.1, gt=0, description="Voxel edge length (meters)")
    max_steps: Optional[int] = Field(
        default=None,
        gt=0,
        description="Cap on parametric boundary crossings; defaults to the voxel Manhattan distance",
    )


def _project_root() -> Path:
    # src/voxel_casting/config.py -> project root
    return Path(__file__).resolve().parents[2]


def load_config(
    path: Optional[str | Path] = None, *, allow_missing: bool = True
) -> VoxelCastingConfig:
    """
    Load configuration from YAML into a typed VoxelCastingConfig.

    Search order when path is None:
    1) repo_root/config/default.yaml
    2) if missing and allow_missing=True: return default VoxelCastingConfig()

    Args:
        path: Explicit YAML file path.
        allow_missing: If True, returns defaults when file missing; otherwise raises.

    Returns:
        VoxelCastingConfig instance
    """
    if path is None:
        cfg_path = _project_root() / "config" / "default.yaml"
    else:
        cfg_path = Path(path)

    if not cfg_path.exists():
        if allow_missing:
            return VoxelCastingConfig()
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid configuration in {cfg_path}: expected a mapping")

    try:
        return VoxelCastingConfig.model_validate(raw.get("voxel_casting", raw))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {cfg_path}: {e}") from e
