"""
Loading helpers.

Build a robot model from a ROS-style package layout:
    package://<package>/urdf/<model><suffix>.urdf
The constraint / collision-pair document (SRDF) is handled by an external
collaborator once the kinematic tree exists; only its path is composed here.
"""

from typing import Optional, Sequence, Tuple

from .model.humanoid import RobotModel
from .parser.config import ParserConfig
from .parser.parser import Parser
from .robot.resources import ResourceRetriever


def urdf_uri(package: str, model_name: str, urdf_suffix: str = "") -> str:
    return f"package://{package}/urdf/{model_name}{urdf_suffix}.urdf"


def srdf_uri(package: str, model_name: str, srdf_suffix: str = "") -> str:
    return f"package://{package}/srdf/{model_name}{srdf_suffix}.srdf"


def load_urdf_model(
    package: str,
    filename: str,
    config: Optional[ParserConfig] = None,
    search_paths: Optional[Sequence[str]] = None,
) -> RobotModel:
    """
    Load package://<package>/urdf/<filename>.urdf.

    Args:
        package: Package name resolved through the search paths
        filename: URDF file name without extension
        config: Parser configuration (default: ParserConfig())
        search_paths: Package search roots (default: ROS_PACKAGE_PATH)

    Returns:
        Built RobotModel
    """
    parser = Parser(config, ResourceRetriever(search_paths))
    model = parser.parse(urdf_uri(package, filename))
    return model


def load_robot_model(
    package: str,
    model_name: str,
    urdf_suffix: str = "",
    srdf_suffix: str = "",
    config: Optional[ParserConfig] = None,
    search_paths: Optional[Sequence[str]] = None,
) -> Tuple[RobotModel, str]:
    """
    Load a robot model and compose the path of its companion SRDF document.

    Returns:
        (model, srdf_uri) - the SRDF is left to the collision-pair parser
    """
    parser = Parser(config, ResourceRetriever(search_paths))
    model = parser.parse(urdf_uri(package, model_name, urdf_suffix))
    return model, srdf_uri(package, model_name, srdf_suffix)
