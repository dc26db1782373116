"""Models, sockets and the compiled adjacency rules."""

from .rotation import ALL_MODEL_ROTATIONS, ModelRotation
from .socket import Socket, SocketCollection, SocketsCartesian2D, SocketsCartesian3D
from .model import Model, ModelInstance, ModelVariant, expand_models
from .rules import ModelInfo, Rules, RulesBuilder, VariantRef

__all__ = [
    "ALL_MODEL_ROTATIONS",
    "Model",
    "ModelInfo",
    "ModelInstance",
    "ModelRotation",
    "ModelVariant",
    "Rules",
    "RulesBuilder",
    "Socket",
    "SocketCollection",
    "SocketsCartesian2D",
    "SocketsCartesian3D",
    "VariantRef",
    "expand_models",
]
