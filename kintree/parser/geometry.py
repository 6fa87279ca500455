"""
几何体附着解析模块

对同时带有视觉和碰撞几何体的链接, 计算绝对位姿并生成输出几何体:
    mesh + mesh         -> 网格 (要求两者文件相同)
    cylinder + cylinder -> 圆柱体 (绕Y轴旋转90°, Z轴 -> X轴)
    box + box           -> 长方体 (使用视觉尺寸)
    mesh + cylinder     -> 胶囊体 + 中轴线段
其他组合直接跳过。
"""

from typing import Callable, List, Optional

import numpy as np

from ..errors import BuildError, ErrorKind
from ..model.geometry import (
    BoxAttachment,
    CapsuleAttachment,
    CylinderAttachment,
    GeometryAttachment,
    MeshAttachment,
    SegmentAttachment,
)
from ..model.joint import JointNode
from ..robot.description import (
    BoxGeometry,
    CylinderGeometry,
    LinkNode,
    MeshGeometry,
)
from ..robot.frames import invert_pose, rotation_y


ResourceFetcher = Callable[[str], bytes]


class GeometryResolver:
    """
    几何体解析器

    Attributes:
        root_link_name: 根关节对应的链接
        cylinder_axis_rotation: 圆柱/胶囊体的附加绕Y轴旋转角
        fetch_resource: 可选的外部资源获取器 (uri -> bytes)
    """

    def __init__(self, root_link_name: str, cylinder_axis_rotation: float = np.pi / 2,
                 fetch_resource: Optional[ResourceFetcher] = None):
        self.root_link_name = root_link_name
        self.cylinder_axis_rotation = cylinder_axis_rotation
        self.fetch_resource = fetch_resource

    def body_absolute_position(self, link: LinkNode, joint: JointNode,
                               origin: np.ndarray) -> np.ndarray:
        """
        链接几何体在世界坐标系中的位姿

        文档中的几何偏移相对于未归一化的关节坐标系, 因此先撤销归一化旋转。

        Args:
            link: 链接
            joint: 驱动该链接的关节 (根链接对应根关节)
            origin: 几何体相对链接的位姿 [4, 4]
        """
        parent_in_world = joint.position
        if link.name != self.root_link_name and joint.is_normalized:
            parent_in_world = parent_in_world @ invert_pose(joint.normalization)
        return parent_in_world @ origin

    def resolve(self, link: LinkNode, joint: JointNode) -> List[GeometryAttachment]:
        """
        生成链接的输出几何体

        Returns:
            几何体列表 (组合不支持或链接缺少视觉/碰撞几何体时为空)

        Raises:
            BuildError: 视觉与碰撞网格文件不同 (MISSING_GEOMETRY_MATCH),
                        网格资源无法获取 (MISSING_RESOURCE)
        """
        if link.visual is None or link.collision is None:
            return []

        visual = link.visual.geometry
        collision = link.collision.geometry

        if isinstance(visual, MeshGeometry) and isinstance(collision, MeshGeometry):
            # 暂时假设视觉和碰撞网格相同
            if visual.filename != collision.filename:
                raise BuildError(
                    ErrorKind.MISSING_GEOMETRY_MATCH,
                    f"Unhandled: visual and collision meshes not the same for {link.name}",
                    name=link.name)
            position = self.body_absolute_position(link, joint, link.visual.origin)
            return [MeshAttachment(name=link.name, filename=visual.filename,
                                   position=position, scale=tuple(visual.scale),
                                   data=self._load(link, visual.filename))]

        if isinstance(visual, CylinderGeometry) and isinstance(collision, CylinderGeometry):
            position = self.body_absolute_position(link, joint, link.visual.origin)
            position = position @ rotation_y(self.cylinder_axis_rotation)
            return [CylinderAttachment(name=link.name, radius=visual.radius,
                                       length=visual.length, position=position)]

        if isinstance(visual, BoxGeometry) and isinstance(collision, BoxGeometry):
            position = self.body_absolute_position(link, joint, link.visual.origin)
            return [BoxAttachment(name=link.name, size=tuple(visual.size), position=position)]

        if isinstance(visual, MeshGeometry) and isinstance(collision, CylinderGeometry):
            position = self.body_absolute_position(link, joint, link.collision.origin)
            position = position @ rotation_y(self.cylinder_axis_rotation)
            capsule = CapsuleAttachment(name=link.name, length=collision.length,
                                        radius=collision.radius, position=position)
            point1, point2 = capsule.end_points()
            segment = SegmentAttachment(name=f"{link.name}-segment", point1=point1,
                                        point2=point2, radius=collision.radius,
                                        position=position.copy())
            return [capsule, segment]

        return []

    def _load(self, link: LinkNode, filename: str) -> Optional[bytes]:
        if self.fetch_resource is None:
            return None
        try:
            return self.fetch_resource(filename)
        except (OSError, ValueError) as e:
            raise BuildError(ErrorKind.MISSING_RESOURCE,
                             f"Could not load mesh {filename} for {link.name}: {e}",
                             name=link.name) from e
