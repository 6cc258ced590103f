"""Path matching, routers and multi-router dispatch."""

from .dispatcher import Dispatcher, MountEntry, MountPrecedence, Resolution, candidate_roots
from .matcher import extract_params, match_path, normalize_path, param_positions
from .router import SUPPORTED_METHODS, Route, Router, is_supported_method

__all__ = [
    "Dispatcher",
    "MountEntry",
    "MountPrecedence",
    "Resolution",
    "candidate_roots",
    "extract_params",
    "match_path",
    "normalize_path",
    "param_positions",
    "SUPPORTED_METHODS",
    "Route",
    "Router",
    "is_supported_method",
]
