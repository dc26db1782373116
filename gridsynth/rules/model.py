"""Models and their rotated variants.

A Model is what the user declares: sockets on each side, a weight and the
rotations it may appear with. When Rules are built, each model is expanded
into one ModelVariant per allowed rotation. Generation only ever works with
variant indexes; ModelInstance maps a variant back to (model, rotation).

Usage:
    model = SocketsCartesian2D.simple(x_pos=a, x_neg=a, y_pos=b, y_neg=b).new_model()
    model = model.with_all_rotations().with_weight(0.5).with_name("corridor")
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from ..constants import DEFAULT_MODEL_WEIGHT, MIN_MODEL_WEIGHT
from ..grid.direction import CARTESIAN_2D_ROTATION_AXIS, Direction
from .rotation import ALL_MODEL_ROTATIONS, ModelRotation
from .socket import Socket

logger = logging.getLogger(__name__)

# Re-exported so rotations can be imported with the models
__all__ = [
    "ALL_MODEL_ROTATIONS",
    "Model",
    "ModelInstance",
    "ModelRotation",
    "ModelVariant",
    "expand_models",
]


def _checked_weight(weight: float, name: str | None) -> float:
    if not weight > 0.0:
        logger.warning(
            f"Model {name!r} had an invalid weight {weight} (not > 0), "
            f"weight overridden to {MIN_MODEL_WEIGHT}"
        )
        return MIN_MODEL_WEIGHT
    return weight


class Model(BaseModel):
    """A building block for the generator.

    `sockets[direction.value]` lists the sockets on that side of the model.
    Rotations are counter-clockwise around the rotation axis of the Rules,
    and ROT_0 is always allowed.
    """

    model_config = ConfigDict(frozen=True)

    sockets: tuple[tuple[Socket, ...], ...]
    name: str | None = None
    weight: float = DEFAULT_MODEL_WEIGHT
    allowed_rotations: frozenset[ModelRotation] = frozenset({ModelRotation.ROT_0})

    @field_validator("weight")
    @classmethod
    def _clamp_weight(cls, v: float, info: ValidationInfo) -> float:
        return _checked_weight(v, info.data.get("name"))

    @field_validator("allowed_rotations")
    @classmethod
    def _always_rot_0(cls, v: frozenset[ModelRotation]) -> frozenset[ModelRotation]:
        return v | {ModelRotation.ROT_0}

    # -------------------------------------------------------------------------
    # Builder-style copies
    # -------------------------------------------------------------------------

    def with_weight(self, weight: float) -> Model:
        """Copy with another weight. Weights <= 0 are replaced by the smallest positive float.

        Every variant of the model shares this weight.
        """
        return self.model_copy(update={"weight": _checked_weight(weight, self.name)})

    def with_rotation(self, rotation: ModelRotation) -> Model:
        """Copy allowing exactly one rotation, in addition to ROT_0."""
        return self.model_copy(
            update={"allowed_rotations": frozenset({ModelRotation.ROT_0, rotation})}
        )

    def with_rotations(self, rotations: Iterable[ModelRotation]) -> Model:
        """Copy allowing every rotation of `rotations`, in addition to ROT_0."""
        return self.model_copy(
            update={"allowed_rotations": frozenset(rotations) | {ModelRotation.ROT_0}}
        )

    def with_all_rotations(self) -> Model:
        return self.model_copy(update={"allowed_rotations": frozenset(ALL_MODEL_ROTATIONS)})

    def with_no_rotations(self) -> Model:
        return self.model_copy(update={"allowed_rotations": frozenset({ModelRotation.ROT_0})})

    def with_name(self, name: str) -> Model:
        """Copy with a name, used in logs and ModelInfo."""
        return self.model_copy(update={"name": name})

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def rotated_sockets(
        self,
        rotation: ModelRotation,
        axis: Direction = CARTESIAN_2D_ROTATION_AXIS,
    ) -> tuple[tuple[Socket, ...], ...]:
        """Sockets of the model once rotated by `rotation` around `axis`.

        Lateral sockets move around the axis. Sockets on the axis itself keep
        their side but are turned into rotated sockets.
        """
        rotated: list[tuple[Socket, ...]] = [() for _ in self.sockets]

        # 2D models have no socket on their rotation axis
        if len(self.sockets) > axis.value:
            for fixed in (axis, axis.opposite):
                rotated[fixed.value] = tuple(s.rotated(rotation) for s in self.sockets[fixed.value])

        basis = axis.rotation_basis
        shift = rotation.index
        rotated_basis = basis[-shift:] + basis[:-shift]
        for side, source in zip(basis, rotated_basis):
            rotated[side.value] = self.sockets[source.value]
        return tuple(rotated)

    def rotated(
        self,
        rotation: ModelRotation,
        axis: Direction = CARTESIAN_2D_ROTATION_AXIS,
    ) -> Model:
        """Copy with its sockets rotated by `rotation` around `axis`."""
        return self.model_copy(update={"sockets": self.rotated_sockets(rotation, axis)})


class ModelInstance(BaseModel):
    """Identifies a variant by its original model and rotation."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_index: int
    rotation: ModelRotation = ModelRotation.ROT_0

    def __str__(self) -> str:
        return f"id: {self.model_index}, rot: {self.rotation.value}"


class ModelVariant(BaseModel):
    """One rotation of one user model, as expanded by the Rules."""

    model_config = ConfigDict(frozen=True)

    sockets: tuple[tuple[Socket, ...], ...]
    weight: float
    original_index: int
    rotation: ModelRotation
    name: str | None = None

    def to_instance(self) -> ModelInstance:
        return ModelInstance(model_index=self.original_index, rotation=self.rotation)

    def __str__(self) -> str:
        return f"[{self.original_index} ({self.name}) rotation {self.rotation.value}]"


def expand_models(models: Iterable[Model], rotation_axis: Direction) -> list[ModelVariant]:
    """Expand every model into one variant per allowed rotation.

    Rotations are enumerated in ALL_MODEL_ROTATIONS order, so variant
    indexes are deterministic.
    """
    variants = []
    for index, model in enumerate(models):
        for rotation in ALL_MODEL_ROTATIONS:
            if rotation not in model.allowed_rotations:
                continue
            variants.append(
                ModelVariant(
                    sockets=model.rotated_sockets(rotation, rotation_axis),
                    weight=model.weight,
                    original_index=index,
                    rotation=rotation,
                    name=model.name,
                )
            )
    return variants
