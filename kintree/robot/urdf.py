"""
URDF 解码模块

使用 yourdfpy 读取URDF文件/文本, 转换为不可变的 RobotDescription。
只读取结构信息, 不加载网格。
"""

import io
import os
from typing import Optional

import numpy as np
import yourdfpy

from ..errors import BuildError, ErrorKind
from .description import (
    BoxGeometry,
    CylinderGeometry,
    GeometryElement,
    Inertial,
    JointKind,
    JointLimits,
    JointSpec,
    LinkNode,
    MeshGeometry,
    RobotDescription,
    SphereGeometry,
)


_LOAD_OPTIONS = dict(
    build_scene_graph=False,
    build_collision_scene_graph=False,
    load_meshes=False,
    load_collision_meshes=False,
)


def _origin(origin) -> np.ndarray:
    return np.eye(4) if origin is None else np.asarray(origin, dtype=np.float64)


def _convert_geometry(geometry):
    if geometry is None:
        return None
    if geometry.mesh is not None:
        scale = geometry.mesh.scale
        if scale is None:
            scale = (1.0, 1.0, 1.0)
        elif np.isscalar(scale):
            scale = (float(scale),) * 3
        return MeshGeometry(filename=geometry.mesh.filename,
                            scale=tuple(float(s) for s in scale))
    if geometry.cylinder is not None:
        return CylinderGeometry(radius=float(geometry.cylinder.radius),
                                length=float(geometry.cylinder.length))
    if geometry.box is not None:
        return BoxGeometry(size=tuple(float(s) for s in geometry.box.size))
    if geometry.sphere is not None:
        return SphereGeometry(radius=float(geometry.sphere.radius))
    return None


def _convert_element(elements) -> Optional[GeometryElement]:
    # 仅使用第一个 visual/collision 元素
    if not elements:
        return None
    element = elements[0]
    geometry = _convert_geometry(element.geometry)
    if geometry is None:
        return None
    return GeometryElement(geometry=geometry, origin=_origin(element.origin))


def _convert_inertial(inertial) -> Optional[Inertial]:
    if inertial is None:
        return None
    mass = 0.0 if inertial.mass is None else float(inertial.mass)
    inertia = np.zeros((3, 3)) if inertial.inertia is None else inertial.inertia
    return Inertial(mass=mass, origin=_origin(inertial.origin), inertia=inertia)


def _convert_limits(limit) -> Optional[JointLimits]:
    if limit is None:
        return None

    def value(v):
        return 0.0 if v is None else float(v)

    return JointLimits(lower=value(limit.lower), upper=value(limit.upper),
                       velocity=value(limit.velocity), effort=value(limit.effort))


def description_from_urdf(urdf: yourdfpy.URDF) -> RobotDescription:
    """
    yourdfpy.URDF -> RobotDescription

    Raises:
        BuildError: 结构不合法 (INVALID_DESCRIPTION)
    """
    robot = urdf.robot
    links = [
        LinkNode(
            name=link.name,
            inertial=_convert_inertial(link.inertial),
            visual=_convert_element(link.visuals),
            collision=_convert_element(link.collisions),
        )
        for link in robot.links
    ]
    joints = [
        JointSpec(
            name=joint.name,
            kind=JointKind.from_string(joint.type),
            parent_link=joint.parent,
            child_link=joint.child,
            axis=np.array([1.0, 0.0, 0.0]) if joint.axis is None else joint.axis,
            origin=_origin(joint.origin),
            limits=_convert_limits(joint.limit),
        )
        for joint in robot.joints
    ]
    try:
        return RobotDescription(robot.name, links, joints)
    except ValueError as e:
        raise BuildError(ErrorKind.INVALID_DESCRIPTION, str(e), name=robot.name) from e


def description_from_string(robot_description: str) -> RobotDescription:
    """
    解析URDF文本

    Raises:
        BuildError: URDF格式错误 (INVALID_DESCRIPTION)
    """
    try:
        urdf = yourdfpy.URDF.load(io.BytesIO(robot_description.encode('utf-8')), **_LOAD_OPTIONS)
    except Exception as e:
        raise BuildError(ErrorKind.INVALID_DESCRIPTION,
                         f"Failed to parse URDF description: {e}") from e
    return description_from_urdf(urdf)


def load_description(urdf_path: str) -> RobotDescription:
    """
    解析URDF文件

    Raises:
        FileNotFoundError: 文件不存在
        BuildError: URDF格式错误
    """
    if not os.path.exists(urdf_path):
        raise FileNotFoundError(f"URDF file not found: {urdf_path}")
    with open(urdf_path, 'r', encoding='utf-8') as f:
        return description_from_string(f.read())
