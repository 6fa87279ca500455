"""
输出模型模块

RobotModel 是一次构建的结果: 运动学树、解剖学角色表以及
由角色推导出的末端执行器(手、脚、视线)局部坐标系。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..errors import BuildError
from .geometry import GeometryAttachment
from .joint import JointNode, KinematicTree


class AnatomyRole(Enum):
    """解剖学角色"""
    WAIST = 'waist'
    CHEST = 'chest'
    LEFT_WRIST = 'left_wrist'
    RIGHT_WRIST = 'right_wrist'
    LEFT_HAND = 'left_hand'
    RIGHT_HAND = 'right_hand'
    LEFT_ANKLE = 'left_ankle'
    RIGHT_ANKLE = 'right_ankle'
    LEFT_FOOT = 'left_foot'
    RIGHT_FOOT = 'right_foot'
    GAZE = 'gaze'


@dataclass
class AnatomyRegistry:
    """角色 -> 关节名称, 未解析的角色为None"""
    waist_joint_name: Optional[str] = None
    chest_joint_name: Optional[str] = None
    left_wrist_joint_name: Optional[str] = None
    right_wrist_joint_name: Optional[str] = None
    left_hand_joint_name: Optional[str] = None
    right_hand_joint_name: Optional[str] = None
    left_ankle_joint_name: Optional[str] = None
    right_ankle_joint_name: Optional[str] = None
    left_foot_joint_name: Optional[str] = None
    right_foot_joint_name: Optional[str] = None
    gaze_joint_name: Optional[str] = None

    def get(self, role: AnatomyRole) -> Optional[str]:
        return getattr(self, f"{role.value}_joint_name")

    def set(self, role: AnatomyRole, joint_name: Optional[str]):
        setattr(self, f"{role.value}_joint_name", joint_name)

    def as_dict(self) -> Dict[AnatomyRole, Optional[str]]:
        return {role: self.get(role) for role in AnatomyRole}


@dataclass
class HandFrame:
    """
    手部局部坐标系 (在腕关节坐标系中表示)

    Attributes:
        center: 手部中心 [3]
        thumb_axis: 拇指方向 [3]
        fore_finger_axis: 食指方向 [3]
        palm_normal: 掌心法向 [3]
    """
    wrist_joint_name: str
    hand_joint_name: str
    center: np.ndarray
    thumb_axis: np.ndarray
    fore_finger_axis: np.ndarray
    palm_normal: np.ndarray


@dataclass
class FootFrame:
    """脚部描述: 踝关节在脚坐标系中的位置"""
    ankle_joint_name: str
    foot_joint_name: str
    ankle_position_in_local_frame: np.ndarray
    # TODO: derive sole size from the robot contact points definition
    sole_size: Tuple[float, float] = (0.0, 0.0)


@dataclass
class GazeFrame:
    """视线方向和原点, 在视线关节局部坐标系中表示"""
    joint_name: str
    direction: np.ndarray
    origin: np.ndarray


@dataclass
class RobotModel:
    """
    构建结果

    Attributes:
        name: 机器人名称
        tree: 运动学树
        anatomy: 解剖学角色表
        left_hand/right_hand/left_foot/right_foot/gaze: 末端执行器描述
        geometry_errors: 单个链接几何体附着失败的记录 (不影响其他链接)
        warnings: 构建过程中的可恢复问题
    """
    name: str
    tree: KinematicTree
    anatomy: AnatomyRegistry = field(default_factory=AnatomyRegistry)
    left_hand: Optional[HandFrame] = None
    right_hand: Optional[HandFrame] = None
    left_foot: Optional[FootFrame] = None
    right_foot: Optional[FootFrame] = None
    gaze: Optional[GazeFrame] = None
    geometry_errors: List[BuildError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def root_joint(self) -> JointNode:
        return self.tree.root_joint

    @property
    def joints(self) -> List[JointNode]:
        """先序遍历顺序的关节列表"""
        return list(self.tree.walk())

    @property
    def n_joints(self) -> int:
        return len(self.tree)

    def find_joint(self, name: Optional[str]) -> Optional[JointNode]:
        return self.tree.find(name)

    @property
    def actuated_joints(self) -> List[JointNode]:
        """驱动关节 (revolute/continuous/prismatic), 按描述文档顺序"""
        return [j for j in self.tree if j.kind.is_actuated]

    @property
    def config_size(self) -> int:
        return sum(j.dof for j in self.tree)

    @property
    def geometries(self) -> List[GeometryAttachment]:
        return [g for joint in self.tree.walk() for g in joint.geometries]

    @property
    def lower_limits(self) -> np.ndarray:
        """配置向量下限 [config_size]"""
        lower = np.full(self.config_size, -np.inf)
        for joint in self.tree:
            rank = joint.rank_in_configuration
            lower[rank:rank + joint.dof] = joint.lower_bounds()
        return lower

    @property
    def upper_limits(self) -> np.ndarray:
        """配置向量上限 [config_size]"""
        upper = np.full(self.config_size, np.inf)
        for joint in self.tree:
            rank = joint.rank_in_configuration
            upper[rank:rank + joint.dof] = joint.upper_bounds()
        return upper

    def print_tree(self):
        """打印运动学树结构"""
        print(f"Kinematic Tree: {self.name}")
        print(f"Number of joints: {self.n_joints}, configuration size: {self.config_size}\n")

        def _print(joint: JointNode, depth: int):
            indent = "  " * depth
            print(f"{indent}{joint.name} ({joint.kind.value}, dof={joint.dof})")
            if joint.body is not None and joint.body.mass > 0:
                print(f"{indent}  mass: {joint.body.mass:.4f}")
            for bound in joint.bounds:
                if bound.bounded:
                    print(f"{indent}  bounds: [{bound.lower:.4f}, {bound.upper:.4f}]")
            for child in self.tree.children_of(joint):
                _print(child, depth + 1)

        if self.tree.root_joint is not None:
            _print(self.tree.root_joint, 0)

    def display_end_effectors(self):
        """打印手、脚的局部坐标系信息"""
        for label, hand in (("Left hand", self.left_hand), ("Right hand", self.right_hand)):
            if hand is None:
                print(f"{label}: not set")
                continue
            print(f"{label} (wrist {hand.wrist_joint_name}):")
            print(f"  Center: {hand.center}")
            print(f"  Thumb axis: {hand.thumb_axis}")
            print(f"  Fore finger axis: {hand.fore_finger_axis}")
            print(f"  Palm axis: {hand.palm_normal}")
        for label, foot in (("Left foot", self.left_foot), ("Right foot", self.right_foot)):
            if foot is None:
                print(f"{label}: not set")
                continue
            print(f"{label} (ankle {foot.ankle_joint_name}):")
            print(f"  Ankle position in local frame: {foot.ankle_position_in_local_frame}")
            print(f"  Foot width: {foot.sole_size[1]} foot depth: {foot.sole_size[0]}")

    def display_actuated_joints(self, q: Optional[np.ndarray] = None):
        """打印驱动关节在配置向量中的取值"""
        if q is None:
            q = np.zeros(self.config_size)
        values = [f"{q[j.rank_in_configuration]:.4f}" for j in self.actuated_joints]
        print("Actuated joints : " + " ".join(values))
