"""
运动学树节点模块

JointNode 保存于 KinematicTree 的数组(arena)中, 父子关系使用索引表示:
每个节点拥有其子节点索引列表, parent 索引仅用于诊断和向上遍历。
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np

from ..robot.description import JointKind
from .geometry import GeometryAttachment


@dataclass
class DofBound:
    """
    单个自由度的边界

    Attributes:
        bounded: 是否有位置限位
        lower/upper: 位置限位
        velocity: (下界, 上界) 速度限位
        effort: (下界, 上界) 力/力矩限位
    """
    bounded: bool = False
    lower: float = -np.inf
    upper: float = np.inf
    velocity: tuple = (-np.inf, np.inf)
    effort: tuple = (-np.inf, np.inf)

    def set_bounds(self, lower: float, upper: float):
        self.bounded = True
        self.lower = lower
        self.upper = upper

    def unbound(self):
        self.bounded = False
        self.lower = -np.inf
        self.upper = np.inf


@dataclass
class BodyNode:
    """
    刚体惯性参数, 在所属关节的归一化坐标系中表示

    Attributes:
        mass: 质量 (>= 0)
        local_com: 局部质心 [3]
        inertia: 3x3 对称惯性张量
    """
    mass: float = 0.0
    local_com: np.ndarray = field(default_factory=lambda: np.zeros(3))
    inertia: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))


# 每种关节的自由度数量
DOF_COUNT = {
    JointKind.REVOLUTE: 1,
    JointKind.CONTINUOUS: 1,
    JointKind.PRISMATIC: 1,
    JointKind.FLOATING: 6,
    JointKind.FIXED: 0,
}


@dataclass
class JointNode:
    """
    运动学树中的关节

    Attributes:
        name: 关节名称
        kind: 关节类型
        position: 初始绝对位姿 [4, 4] (驱动关节为归一化后的坐标系)
        normalization: 归一化变换 [4, 4] (非驱动关节为单位矩阵)
        bounds: 每个自由度的边界
        link_name: 该关节驱动的链接名称
        index: 在 KinematicTree 中的索引
        parent: 父关节索引 (根节点为None)
        children: 子关节索引, 顺序与描述文档一致
        body: 惯性参数
        geometries: 几何体
        rank_in_configuration: 在配置向量中的起始下标
    """
    name: str
    kind: JointKind
    position: np.ndarray
    normalization: np.ndarray = field(default_factory=lambda: np.eye(4))
    bounds: List[DofBound] = field(default_factory=list)
    link_name: Optional[str] = None
    index: int = -1
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    body: Optional[BodyNode] = None
    geometries: List[GeometryAttachment] = field(default_factory=list)
    rank_in_configuration: int = 0

    @property
    def dof(self) -> int:
        return len(self.bounds)

    @property
    def is_normalized(self) -> bool:
        return self.kind.is_actuated

    @property
    def initial_position(self) -> np.ndarray:
        return self.position.copy()

    def lower_bounds(self) -> np.ndarray:
        return np.array([b.lower for b in self.bounds])

    def upper_bounds(self) -> np.ndarray:
        return np.array([b.upper for b in self.bounds])


class KinematicTree:
    """
    关节数组 + 名称索引

    名称唯一: 重复添加由 JointFactory 在创建前拒绝。
    """

    def __init__(self):
        self.joints: List[JointNode] = []
        self._index: Dict[str, int] = {}
        self.root: Optional[int] = None

    def __len__(self) -> int:
        return len(self.joints)

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[JointNode]:
        return iter(self.joints)

    def add(self, joint: JointNode) -> JointNode:
        """加入新关节并分配索引; 名称已存在时抛出KeyError"""
        if joint.name in self._index:
            raise KeyError(joint.name)
        joint.index = len(self.joints)
        self.joints.append(joint)
        self._index[joint.name] = joint.index
        return joint

    def find(self, name: Optional[str]) -> Optional[JointNode]:
        """按名称查找关节, 不存在时返回None"""
        if name is None or name not in self._index:
            return None
        return self.joints[self._index[name]]

    def __getitem__(self, index: int) -> JointNode:
        return self.joints[index]

    @property
    def root_joint(self) -> Optional[JointNode]:
        return None if self.root is None else self.joints[self.root]

    def attach(self, parent: JointNode, child: JointNode):
        """将child追加为parent的最后一个子节点"""
        child.parent = parent.index
        parent.children.append(child.index)

    def children_of(self, joint: JointNode) -> List[JointNode]:
        return [self.joints[i] for i in joint.children]

    def parent_of(self, joint: JointNode) -> Optional[JointNode]:
        return None if joint.parent is None else self.joints[joint.parent]

    def prune(self) -> List[JointNode]:
        """
        删除从根节点不可达的关节, 并重新编号剩余节点

        Returns:
            被删除的关节列表 (按原数组顺序)
        """
        reachable = {joint.index for joint in self.walk()}
        removed = [j for j in self.joints if j.index not in reachable]
        if not removed:
            return []

        kept = [j for j in self.joints if j.index in reachable]
        remap = {j.index: i for i, j in enumerate(kept)}
        for joint in kept:
            joint.index = remap[joint.index]
            if joint.parent is not None:
                joint.parent = remap[joint.parent]
            joint.children = [remap[c] for c in joint.children]

        self.root = remap[self.root]
        self.joints = kept
        self._index = {j.name: j.index for j in kept}
        return removed

    def walk(self) -> Iterator[JointNode]:
        """从根节点开始的先序遍历"""
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            joint = self.joints[stack.pop()]
            yield joint
            stack.extend(reversed(joint.children))
