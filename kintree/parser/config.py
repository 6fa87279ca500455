"""
Parser Configuration

Naming conventions and fixed policies used while building a kinematic tree.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple

from ..model.humanoid import AnatomyRole


def default_anatomy_links() -> Dict[AnatomyRole, str]:
    """Role -> well-known link name. The waist is bound to the root joint instead."""
    return {
        AnatomyRole.CHEST: "torso",
        AnatomyRole.LEFT_WRIST: "l_wrist",
        AnatomyRole.RIGHT_WRIST: "r_wrist",
        AnatomyRole.LEFT_HAND: "l_gripper",
        AnatomyRole.RIGHT_HAND: "r_gripper",
        AnatomyRole.LEFT_ANKLE: "l_ankle",
        AnatomyRole.RIGHT_ANKLE: "r_ankle",
        AnatomyRole.LEFT_FOOT: "l_sole",
        AnatomyRole.RIGHT_FOOT: "r_sole",
        AnatomyRole.GAZE: "gaze",
    }


@dataclass
class ParserConfig:
    """Configuration for the kinematic tree parser."""

    # Synthesized root (6-DOF free flyer)
    root_joint_name: str = "base_joint"
    root_link_name: str = "base_link"

    # Joint poses are resolved relative to this joint; a name that is not
    # in the document resolves all the way up to the root link.
    reference_joint_name: Optional[str] = "base_footprint_joint"

    # Free flyer bounds policy: roll/pitch clamped, translations and yaw free
    bound_free_flyer: bool = True
    free_flyer_rotation_bound: float = math.pi / 6

    # Anatomy
    resolve_anatomy: bool = True
    anatomy_links: Dict[AnatomyRole, str] = field(default_factory=default_anatomy_links)
    gaze_direction: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    gaze_origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Geometry
    cylinder_axis_rotation: float = math.pi / 2  # URDF cylinders along Z, primitives along X
    load_mesh_data: bool = False

    # Recursion bound for pose resolution / assembly (None: number of joints + 1)
    max_depth: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        assert self.root_joint_name, "root_joint_name must not be empty"
        assert self.root_link_name, "root_link_name must not be empty"
        assert 0.0 <= self.free_flyer_rotation_bound <= math.pi, \
            "free_flyer_rotation_bound must be in [0, pi]"
        assert self.max_depth is None or self.max_depth > 0, "max_depth must be positive"
        assert len(self.gaze_direction) == 3 and len(self.gaze_origin) == 3, \
            "gaze direction and origin must be 3-vectors"

    def depth_limit(self, n_joints: int) -> int:
        return self.max_depth if self.max_depth is not None else n_joints + 1

    def to_dict(self) -> Dict:
        """Plain dict suitable for json.dump."""
        data = asdict(self)
        data["anatomy_links"] = {role.value: link for role, link in self.anatomy_links.items()}
        data["gaze_direction"] = list(self.gaze_direction)
        data["gaze_origin"] = list(self.gaze_origin)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "ParserConfig":
        data = dict(data)
        if "anatomy_links" in data:
            data["anatomy_links"] = {
                AnatomyRole(role): link for role, link in data["anatomy_links"].items()
            }
        for key in ("gaze_direction", "gaze_origin"):
            if key in data:
                data[key] = tuple(data[key])
        return cls(**data)

    @classmethod
    def humanoid_default(cls) -> "ParserConfig":
        """Default configuration for humanoid robots (legged floating base)."""
        return cls()

    @classmethod
    def manipulator_default(cls) -> "ParserConfig":
        """Fixed-base manipulators: no anatomy roles, unbounded free flyer."""
        config = cls()
        config.resolve_anatomy = False
        config.anatomy_links = {}
        config.bound_free_flyer = False
        return config
