"""
关节工厂模块

按类型创建 JointNode 并登记到名称索引的 KinematicTree 中。
名称已存在时拒绝创建且不修改注册表。
"""

from typing import Optional

import numpy as np

from ..errors import BuildError, ErrorKind
from ..model.joint import DOF_COUNT, DofBound, JointNode, KinematicTree
from ..robot.description import JointKind, JointLimits


class JointFactory:
    """
    关节工厂

    Attributes:
        tree: 当前构建的注册表
    """

    def __init__(self, tree: KinematicTree):
        self.tree = tree

    def _register(self, name: str, kind: JointKind, position: np.ndarray,
                  link_name: Optional[str] = None) -> JointNode:
        if name in self.tree:
            raise BuildError(ErrorKind.DUPLICATE_NAME,
                             f"Duplicated {kind.value} joint {name}", name=name)
        joint = JointNode(
            name=name,
            kind=kind,
            position=np.array(position, dtype=np.float64).reshape(4, 4),
            bounds=[DofBound() for _ in range(DOF_COUNT[kind])],
            link_name=link_name,
        )
        return self.tree.add(joint)

    @staticmethod
    def _apply_limits(joint: JointNode, limits: Optional[JointLimits]):
        if limits is None:
            return
        bound = joint.bounds[0]
        bound.set_bounds(limits.lower, limits.upper)
        bound.velocity = (-limits.velocity, limits.velocity)
        bound.effort = (-limits.effort, limits.effort)

    def create_freeflyer_joint(self, name: str, position: np.ndarray,
                               link_name: Optional[str] = None) -> JointNode:
        """6自由度浮动关节, 创建时全部无界"""
        return self._register(name, JointKind.FLOATING, position, link_name)

    def create_rotation_joint(self, name: str, position: np.ndarray,
                              limits: Optional[JointLimits] = None,
                              link_name: Optional[str] = None) -> JointNode:
        """有界旋转关节"""
        joint = self._register(name, JointKind.REVOLUTE, position, link_name)
        self._apply_limits(joint, limits)
        return joint

    def create_continuous_joint(self, name: str, position: np.ndarray,
                                link_name: Optional[str] = None) -> JointNode:
        """无界旋转关节"""
        joint = self._register(name, JointKind.CONTINUOUS, position, link_name)
        joint.bounds[0].unbound()
        return joint

    def create_translation_joint(self, name: str, position: np.ndarray,
                                 limits: Optional[JointLimits] = None,
                                 link_name: Optional[str] = None) -> JointNode:
        """有界平移关节"""
        joint = self._register(name, JointKind.PRISMATIC, position, link_name)
        self._apply_limits(joint, limits)
        return joint

    def create_anchor_joint(self, name: str, position: np.ndarray,
                            link_name: Optional[str] = None) -> JointNode:
        """固定关节, 没有运动自由度"""
        return self._register(name, JointKind.FIXED, position, link_name)

    def create(self, kind: JointKind, name: str, position: np.ndarray,
               limits: Optional[JointLimits] = None,
               link_name: Optional[str] = None) -> JointNode:
        """
        按类型分派创建

        Raises:
            BuildError: 名称重复 (DUPLICATE_NAME), PLANAR关节 (PLANAR_UNSUPPORTED),
                        未知类型 (UNSUPPORTED_JOINT_KIND)
        """
        if kind == JointKind.REVOLUTE:
            return self.create_rotation_joint(name, position, limits, link_name)
        if kind == JointKind.CONTINUOUS:
            return self.create_continuous_joint(name, position, link_name)
        if kind == JointKind.PRISMATIC:
            return self.create_translation_joint(name, position, limits, link_name)
        if kind == JointKind.FLOATING:
            return self.create_freeflyer_joint(name, position, link_name)
        if kind == JointKind.FIXED:
            return self.create_anchor_joint(name, position, link_name)
        if kind == JointKind.PLANAR:
            raise BuildError(ErrorKind.PLANAR_UNSUPPORTED,
                             f"PLANAR joints are not supported ({name})", name=name)
        raise BuildError(ErrorKind.UNSUPPORTED_JOINT_KIND,
                         f"Joint {name} has unsupported type {kind.value}", name=name)
