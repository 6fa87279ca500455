"""
kintree: build oriented kinematic trees from robot descriptions.
"""

__version__ = "0.1.0"

from .errors import BuildError, BuildResult, BuildWarning, ErrorKind
from .parser import Parser, ParserConfig
from .model import RobotModel
from .util import load_urdf_model, load_robot_model

__all__ = [
    "BuildError",
    "BuildResult",
    "BuildWarning",
    "ErrorKind",
    "Parser",
    "ParserConfig",
    "RobotModel",
    "load_urdf_model",
    "load_robot_model",
]
