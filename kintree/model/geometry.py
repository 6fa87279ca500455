"""
几何体附着模块

每个变体带有形状参数和世界坐标系下的绝对位姿。
这里只描述"是什么、在哪里", 渲染和碰撞检测由外部后端负责。
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np


@dataclass
class MeshAttachment:
    name: str
    filename: str
    position: np.ndarray
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    # 外部资源获取器返回的原始字节, 未加载时为None
    data: Optional[bytes] = None

    kind = 'mesh'


@dataclass
class CylinderAttachment:
    """圆柱体, 轴线沿局部X轴"""
    name: str
    radius: float
    length: float
    position: np.ndarray

    kind = 'cylinder'


@dataclass
class BoxAttachment:
    name: str
    size: Tuple[float, float, float]
    position: np.ndarray

    kind = 'box'


@dataclass
class CapsuleAttachment:
    """胶囊体, 轴线沿局部X轴, 以原点为中心"""
    name: str
    length: float
    radius: float
    position: np.ndarray

    kind = 'capsule'

    def end_points(self) -> Tuple[np.ndarray, np.ndarray]:
        """胶囊体中轴线两个端点 (局部坐标)"""
        half = 0.5 * self.length
        return np.array([-half, 0.0, 0.0]), np.array([half, 0.0, 0.0])


@dataclass
class SegmentAttachment:
    """
    胶囊体的中轴线段近似, 仅用于碰撞距离的快速预筛选

    端点在局部坐标系中表示, position 与对应胶囊体相同。
    """
    name: str
    point1: np.ndarray
    point2: np.ndarray
    radius: float
    position: np.ndarray

    kind = 'segment'

    def world_points(self) -> Tuple[np.ndarray, np.ndarray]:
        R = self.position[:3, :3]
        p = self.position[:3, 3]
        return R @ self.point1 + p, R @ self.point2 + p


GeometryAttachment = Union[MeshAttachment, CylinderAttachment, BoxAttachment,
                           CapsuleAttachment, SegmentAttachment]
