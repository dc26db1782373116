"""Rotations of models around the rules' rotation axis."""

from __future__ import annotations

from enum import Enum


class ModelRotation(Enum):
    """Rotation around an axis, counter-clockwise. The value is in degrees."""

    ROT_0 = 0
    ROT_90 = 90
    ROT_180 = 180
    ROT_270 = 270

    @property
    def index(self) -> int:
        """Position of the rotation in ALL_MODEL_ROTATIONS (number of quarter turns)."""
        return self.value // 90

    def rotated(self, rotation: ModelRotation) -> ModelRotation:
        """This rotation rotated further by `rotation`.

        Example:
            ModelRotation.ROT_90.rotated(ModelRotation.ROT_180) == ModelRotation.ROT_270
        """
        return ALL_MODEL_ROTATIONS[(self.index + rotation.index) % len(ALL_MODEL_ROTATIONS)]

    @property
    def next(self) -> ModelRotation:
        """This rotation rotated by one more quarter turn."""
        return self.rotated(ModelRotation.ROT_90)


# Deterministic order used everywhere rotations are enumerated
ALL_MODEL_ROTATIONS: tuple[ModelRotation, ...] = (
    ModelRotation.ROT_0,
    ModelRotation.ROT_90,
    ModelRotation.ROT_180,
    ModelRotation.ROT_270,
)
