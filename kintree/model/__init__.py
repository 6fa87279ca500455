"""
Model 模块：运动学树输出模型

- joint: JointNode / BodyNode / KinematicTree
- geometry: 几何体附着变体
- humanoid: 解剖学角色表与 RobotModel
"""

from .geometry import (
    MeshAttachment,
    CylinderAttachment,
    BoxAttachment,
    CapsuleAttachment,
    SegmentAttachment,
)
from .joint import DofBound, BodyNode, JointNode, KinematicTree
from .humanoid import (
    AnatomyRole,
    AnatomyRegistry,
    HandFrame,
    FootFrame,
    GazeFrame,
    RobotModel,
)

__all__ = [
    'MeshAttachment',
    'CylinderAttachment',
    'BoxAttachment',
    'CapsuleAttachment',
    'SegmentAttachment',
    'DofBound',
    'BodyNode',
    'JointNode',
    'KinematicTree',
    'AnatomyRole',
    'AnatomyRegistry',
    'HandFrame',
    'FootFrame',
    'GazeFrame',
    'RobotModel',
]
