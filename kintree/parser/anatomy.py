"""
解剖学角色解析模块

通过约定的链接名称查找特殊关节(胸、腕、手、踝、脚、视线),
并由关节初始位姿推导手、脚的局部坐标系。
"""

import warnings
from typing import Dict, Optional

import numpy as np

from ..errors import BuildWarning
from ..model.humanoid import (
    AnatomyRegistry,
    AnatomyRole,
    FootFrame,
    GazeFrame,
    HandFrame,
)
from ..model.joint import KinematicTree
from ..robot.description import RobotDescription
from ..robot.frames import invert_pose


class AnatomyResolver:
    """
    角色解析器

    Attributes:
        anatomy_links: 角色 -> 约定链接名称
        waist_joint_name: 腰部固定绑定的关节名称 (根关节)
    """

    def __init__(self, anatomy_links: Dict[AnatomyRole, str], waist_joint_name: str):
        self.anatomy_links = dict(anatomy_links)
        self.waist_joint_name = waist_joint_name

    def find_special_joints(self, description: RobotDescription) -> AnatomyRegistry:
        """
        在输入图中查找约定链接, 取其父关节名称作为角色关节

        Returns:
            角色表 (不存在的角色为None)
        """
        registry = AnatomyRegistry(waist_joint_name=self.waist_joint_name)
        for role, link_name in self.anatomy_links.items():
            if role == AnatomyRole.WAIST:
                continue
            link = description.get_link(link_name)
            if link is not None and link.parent_joint is not None:
                registry.set(role, link.parent_joint)
        return registry

    def set_special_joints(self, registry: AnatomyRegistry, tree: KinematicTree):
        """只保留树中真实存在的角色关节, 缺失的角色给出提示"""
        for role in AnatomyRole:
            if tree.find(registry.get(role)) is None:
                warnings.warn(f"No {role.value.replace('_', ' ')} joint found",
                              BuildWarning, stacklevel=2)
                registry.set(role, None)

    @staticmethod
    def relative_pose(tree: KinematicTree, frame_joint: str, target_joint: str) -> np.ndarray:
        """frame^-1 · target, 使用两个关节的初始绝对位姿"""
        world_M_frame = tree.find(frame_joint).initial_position
        world_M_target = tree.find(target_joint).initial_position
        return invert_pose(world_M_frame) @ world_M_target

    def compute_hand(self, tree: KinematicTree, wrist: Optional[str],
                     hand: Optional[str], side: str) -> Optional[HandFrame]:
        if tree.find(wrist) is None or tree.find(hand) is None:
            warnings.warn(f"Could not set {side} hand", BuildWarning, stacklevel=2)
            return None
        wrist_M_hand = self.relative_pose(tree, wrist, hand)
        R = wrist_M_hand[:3, :3]
        return HandFrame(
            wrist_joint_name=wrist,
            hand_joint_name=hand,
            center=wrist_M_hand[:3, 3].copy(),
            thumb_axis=R[:, 0].copy(),
            fore_finger_axis=R[:, 1].copy(),
            palm_normal=R[:, 2].copy(),
        )

    def compute_foot(self, tree: KinematicTree, ankle: Optional[str],
                     foot: Optional[str], side: str) -> Optional[FootFrame]:
        if tree.find(ankle) is None or tree.find(foot) is None:
            warnings.warn(f"Could not set {side} foot", BuildWarning, stacklevel=2)
            return None
        foot_M_ankle = self.relative_pose(tree, foot, ankle)
        return FootFrame(
            ankle_joint_name=ankle,
            foot_joint_name=foot,
            ankle_position_in_local_frame=foot_M_ankle[:3, 3].copy(),
        )

    @staticmethod
    def compute_gaze(tree: KinematicTree, gaze: Optional[str],
                     direction, origin) -> Optional[GazeFrame]:
        if tree.find(gaze) is None:
            return None
        return GazeFrame(joint_name=gaze,
                         direction=np.array(direction, dtype=np.float64),
                         origin=np.array(origin, dtype=np.float64))
