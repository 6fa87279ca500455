"""
机器人描述输入图模块

定义由描述文档解码得到的不可变 link/joint 图。
该图是运动学树构建引擎的输入, 构建过程中不会被修改。
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np


class JointKind(Enum):
    """关节类型"""
    REVOLUTE = 'revolute'
    CONTINUOUS = 'continuous'
    PRISMATIC = 'prismatic'
    FLOATING = 'floating'
    FIXED = 'fixed'
    PLANAR = 'planar'
    UNKNOWN = 'unknown'

    @classmethod
    def from_string(cls, value: str) -> 'JointKind':
        """将URDF中的类型字符串转换为枚举, 无法识别时返回UNKNOWN"""
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            return cls.UNKNOWN

    @property
    def is_actuated(self) -> bool:
        """是否为单自由度驱动关节(需要进行坐标系归一化)"""
        return self in (JointKind.REVOLUTE, JointKind.CONTINUOUS, JointKind.PRISMATIC)


def _frozen_array(values, shape: Tuple[int, ...]) -> np.ndarray:
    array = np.array(values, dtype=np.float64).reshape(shape)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class JointLimits:
    """关节限位 (lower, upper, velocity, effort)"""
    lower: float = 0.0
    upper: float = 0.0
    velocity: float = 0.0
    effort: float = 0.0


@dataclass(frozen=True)
class Inertial:
    """
    惯性参数

    Attributes:
        mass: 质量
        origin: 惯性坐标系相对link坐标系的位姿 [4, 4]
        inertia: 3x3 对称惯性张量 (在惯性坐标系中表示)
    """
    mass: float = 0.0
    origin: np.ndarray = field(default_factory=lambda: np.eye(4))
    inertia: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))

    def __post_init__(self):
        object.__setattr__(self, 'origin', _frozen_array(self.origin, (4, 4)))
        object.__setattr__(self, 'inertia', _frozen_array(self.inertia, (3, 3)))

    @property
    def center_of_mass(self) -> np.ndarray:
        """质心在link坐标系中的位置 [3]"""
        return self.origin[:3, 3].copy()

    @classmethod
    def from_components(cls, mass: float, com: Sequence[float] = (0., 0., 0.),
                        ixx: float = 0., ixy: float = 0., ixz: float = 0.,
                        iyy: float = 0., iyz: float = 0., izz: float = 0.) -> 'Inertial':
        """由URDF风格的六个分量构造惯性参数"""
        origin = np.eye(4)
        origin[:3, 3] = com
        inertia = np.array([[ixx, ixy, ixz],
                            [ixy, iyy, iyz],
                            [ixz, iyz, izz]])
        return cls(mass=mass, origin=origin, inertia=inertia)


@dataclass(frozen=True)
class MeshGeometry:
    filename: str
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class CylinderGeometry:
    radius: float
    length: float


@dataclass(frozen=True)
class BoxGeometry:
    size: Tuple[float, float, float]


@dataclass(frozen=True)
class SphereGeometry:
    radius: float


Geometry = Union[MeshGeometry, CylinderGeometry, BoxGeometry, SphereGeometry]


@dataclass(frozen=True)
class GeometryElement:
    """视觉或碰撞几何体, 带相对link坐标系的位姿"""
    geometry: Geometry
    origin: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self):
        object.__setattr__(self, 'origin', _frozen_array(self.origin, (4, 4)))


@dataclass(frozen=True)
class JointSpec:
    """
    描述文档中的关节

    Attributes:
        name: 关节名称
        kind: 关节类型
        parent_link: 父链接名称
        child_link: 子链接名称
        axis: 旋转/平移轴 (不要求单位长度)
        origin: parent_to_joint_origin 变换 [4, 4]
        limits: 关节限位 (可选)
    """
    name: str
    kind: JointKind
    parent_link: str
    child_link: str
    axis: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    origin: np.ndarray = field(default_factory=lambda: np.eye(4))
    limits: Optional[JointLimits] = None

    def __post_init__(self):
        object.__setattr__(self, 'axis', _frozen_array(self.axis, (3,)))
        object.__setattr__(self, 'origin', _frozen_array(self.origin, (4, 4)))


@dataclass(frozen=True)
class LinkNode:
    """
    描述文档中的链接

    parent_joint 与 child_joints 由 RobotDescription 根据关节列表填充,
    child_joints 保持文档中的声明顺序。
    """
    name: str
    inertial: Optional[Inertial] = None
    visual: Optional[GeometryElement] = None
    collision: Optional[GeometryElement] = None
    parent_joint: Optional[str] = None
    child_joints: Tuple[str, ...] = ()


class RobotDescription:
    """
    不可变的 link/joint 图

    Attributes:
        name: 机器人名称
        links: 链接名称 -> LinkNode (只读映射, 保持声明顺序)
        joints: 关节名称 -> JointSpec (只读映射, 保持声明顺序)
        root_link: 没有父关节的链接名称
    """

    def __init__(self, name: str, links: Sequence[LinkNode], joints: Sequence[JointSpec]):
        """
        从链接和关节列表构建输入图

        Args:
            name: 机器人名称
            links: 链接列表 (parent_joint/child_joints 字段会被重新计算)
            joints: 关节列表

        Raises:
            ValueError: 链接或关节重名, 关节引用了不存在的链接,
                        某链接有多个父关节, 或根链接数量不为1
        """
        self.name = name

        joint_map: Dict[str, JointSpec] = {}
        for joint in joints:
            if joint.name in joint_map:
                raise ValueError(f"Duplicated joint {joint.name} in description")
            joint_map[joint.name] = joint

        link_order: List[str] = []
        link_specs: Dict[str, LinkNode] = {}
        for link in links:
            if link.name in link_specs:
                raise ValueError(f"Duplicated link {link.name} in description")
            link_specs[link.name] = link
            link_order.append(link.name)

        parents: Dict[str, str] = {}
        children: Dict[str, List[str]] = {name: [] for name in link_order}
        for joint in joint_map.values():
            for link_name in (joint.parent_link, joint.child_link):
                if link_name not in link_specs:
                    raise ValueError(
                        f"Joint {joint.name} references unknown link {link_name}")
            if joint.child_link in parents:
                raise ValueError(
                    f"Link {joint.child_link} has several parent joints: "
                    f"{parents[joint.child_link]}, {joint.name}")
            parents[joint.child_link] = joint.name
            children[joint.parent_link].append(joint.name)

        roots = [name for name in link_order if name not in parents]
        if len(roots) != 1:
            raise ValueError(f"Description must have exactly one root link, found {roots}")
        self.root_link = roots[0]

        self.links: Mapping[str, LinkNode] = MappingProxyType({
            name: replace(link_specs[name],
                          parent_joint=parents.get(name),
                          child_joints=tuple(children[name]))
            for name in link_order
        })
        self.joints: Mapping[str, JointSpec] = MappingProxyType(joint_map)

    def get_link(self, name: Optional[str]) -> Optional[LinkNode]:
        """按名称查找链接, 不存在时返回None"""
        if name is None:
            return None
        return self.links.get(name)

    def get_joint(self, name: Optional[str]) -> Optional[JointSpec]:
        """按名称查找关节, 不存在时返回None"""
        if name is None:
            return None
        return self.joints.get(name)

    @property
    def n_joints(self) -> int:
        return len(self.joints)

    @property
    def n_links(self) -> int:
        return len(self.links)

    def __repr__(self) -> str:
        return (f"RobotDescription(name={self.name!r}, links={self.n_links}, "
                f"joints={self.n_joints}, root={self.root_link!r})")
