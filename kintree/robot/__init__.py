"""
Robot 模块：机器人描述与坐标系

该模块提供输入图定义、URDF解码、坐标系归一化和正运动学功能。

子模块:
- description: 不可变的 link/joint 输入图
- urdf: 基于 yourdfpy 的URDF解码
- frames: 齐次变换与关节坐标系归一化
- resources: package:// 等资源获取
- forward_kinematics: 基于PyTorch的正运动学计算
"""

from .description import (
    JointKind,
    JointLimits,
    JointSpec,
    LinkNode,
    Inertial,
    GeometryElement,
    MeshGeometry,
    CylinderGeometry,
    BoxGeometry,
    SphereGeometry,
    RobotDescription,
)

from .frames import (
    pose_matrix,
    rotation_y,
    invert_pose,
    axis_frame,
    normalize_frame_orientation,
)

from .urdf import (
    description_from_string,
    load_description,
)

from .resources import ResourceRetriever

from .forward_kinematics import (
    ForwardKinematics,
    compute_fk,
)

__all__ = [
    # Description
    'JointKind',
    'JointLimits',
    'JointSpec',
    'LinkNode',
    'Inertial',
    'GeometryElement',
    'MeshGeometry',
    'CylinderGeometry',
    'BoxGeometry',
    'SphereGeometry',
    'RobotDescription',
    # Frames
    'pose_matrix',
    'rotation_y',
    'invert_pose',
    'axis_frame',
    'normalize_frame_orientation',
    # URDF
    'description_from_string',
    'load_description',
    'ResourceRetriever',
    # Forward Kinematics
    'ForwardKinematics',
    'compute_fk',
]
