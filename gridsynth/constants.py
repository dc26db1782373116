"""Shared constants for gridsynth.

Centralizes default values used across multiple modules to ensure consistency.
"""

import sys

# Generation retries before giving up (a grid gets DEFAULT_RETRY_COUNT + 1 tries)
DEFAULT_RETRY_COUNT = 50

# Upper bound of the random noise added to node selection scores to break ties
MAX_NOISE_VALUE = 1e-2

# Model weights must be strictly positive; invalid weights are clamped to this
MIN_MODEL_WEIGHT = sys.float_info.min
DEFAULT_MODEL_WEIGHT = 1.0

# Environment variables read by GeneratorConfig.from_env()
ENV_MAX_RETRY_COUNT = "GRIDSYNTH_MAX_RETRY_COUNT"
ENV_NODE_HEURISTIC = "GRIDSYNTH_NODE_HEURISTIC"
ENV_SEED = "GRIDSYNTH_SEED"
