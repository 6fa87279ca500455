"""
刚体惯性附着模块

读取链接的质量/质心/惯性张量, 对归一化过的关节在其归一化坐标系中重新表示:
    com' = R^-1 · com
    I'   = R^-1 · I · R
相似变换保持惯性张量的特征值(主惯量)不变。
"""

import warnings
from typing import Tuple

import numpy as np

from ..errors import BuildError, BuildWarning, ErrorKind
from ..model.joint import BodyNode, JointNode
from ..robot.description import Inertial, LinkNode, RobotDescription
from ..robot.frames import normalize_frame_orientation


def reexpress_inertia(com: np.ndarray, inertia: np.ndarray,
                      rotation: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    在旋转后的坐标系中重新表示质心和惯性张量

    Args:
        com: 质心 [3]
        inertia: 惯性张量 [3, 3]
        rotation: 正交旋转矩阵 R [3, 3]

    Returns:
        (R^T com, R^T I R)
    """
    R = np.asarray(rotation, dtype=np.float64)
    R_inv = R.T
    return R_inv @ com, R_inv @ inertia @ R


def link_inertia(inertial: Inertial) -> Tuple[np.ndarray, np.ndarray]:
    """惯性坐标系 -> link坐标系的质心和惯性张量"""
    R_o = inertial.origin[:3, :3]
    return inertial.center_of_mass, R_o @ inertial.inertia @ R_o.T


class BodyAttacher:
    """为每个关节创建 BodyNode"""

    def __init__(self, description: RobotDescription, root_joint_name: str, root_link_name: str):
        self.description = description
        self.root_joint_name = root_joint_name
        self.root_link_name = root_link_name

    def link_of(self, joint: JointNode) -> LinkNode:
        """
        关节驱动的链接

        Raises:
            BuildError: 链接不存在 (MISSING_LINK)
        """
        if joint.name == self.root_joint_name:
            link_name = self.root_link_name
        else:
            spec = self.description.get_joint(joint.name)
            link_name = spec.child_link if spec is not None else joint.link_name
        link = self.description.get_link(link_name)
        if link is None:
            raise BuildError(ErrorKind.MISSING_LINK,
                             f"Link {link_name} not found, inconsistent model", name=link_name)
        return link

    def compute_body(self, joint: JointNode, link: LinkNode) -> BodyNode:
        if link.inertial is None:
            warnings.warn(f"missing inertial information in link {link.name}",
                          BuildWarning, stacklevel=2)
            return BodyNode()

        com, inertia = link_inertia(link.inertial)
        if joint.name != self.root_joint_name and link.parent_joint is not None:
            parent_spec = self.description.get_joint(link.parent_joint)
            if parent_spec is not None and parent_spec.kind.is_actuated:
                N = normalize_frame_orientation(parent_spec)
                com, inertia = reexpress_inertia(com, inertia, N[:3, :3])

        return BodyNode(mass=float(link.inertial.mass), local_com=com, inertia=inertia)
