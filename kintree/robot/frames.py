"""
坐标系工具模块

提供齐次变换构造/求逆, 以及关节坐标系归一化:
下游动力学表示假设驱动关节绕(或沿)局部X轴运动, 因此需要把
URDF中任意方向的关节轴旋转到X轴上。
"""

import warnings
from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from ..errors import BuildWarning
from .description import JointSpec


def pose_matrix(xyz: Sequence[float] = (0., 0., 0.),
                rpy: Optional[Sequence[float]] = None,
                quaternion: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    由位置和姿态构造4x4齐次变换

    Args:
        xyz: 平移 [3]
        rpy: URDF风格的固定轴 roll/pitch/yaw (弧度)
        quaternion: 四元数 (x, y, z, w), 与rpy二选一

    Returns:
        T: 齐次变换矩阵 [4, 4]
    """
    T = np.eye(4)
    if quaternion is not None:
        T[:3, :3] = Rotation.from_quat(quaternion).as_matrix()
    elif rpy is not None:
        T[:3, :3] = Rotation.from_euler('xyz', rpy).as_matrix()
    T[:3, 3] = xyz
    return T


def rotation_y(angle: float) -> np.ndarray:
    """绕Y轴旋转angle的齐次变换 [4, 4]"""
    T = np.eye(4)
    T[:3, :3] = Rotation.from_euler('y', angle).as_matrix()
    return T


def invert_pose(T: np.ndarray) -> np.ndarray:
    """
    刚体变换求逆

    Args:
        T: 齐次变换 [4, 4]

    Returns:
        T^-1 [4, 4]
    """
    R = T[:3, :3]
    p = T[:3, 3]
    inv = np.eye(4)
    inv[:3, :3] = R.T
    inv[:3, 3] = -R.T @ p
    return inv


def axis_frame(axis: Sequence[float]) -> np.ndarray:
    """
    构造第一列为归一化轴向的正交旋转矩阵

    取轴向绝对值最小的分量对应的标准基向量 y0 (打破退化),
    z = x × y0 归一化后, y = z × x, 得到右手正交基 (x, y, z)。

    Args:
        axis: 非零轴向 [3]

    Returns:
        R: 3x3 旋转矩阵, 列依次为 x, y, z

    Raises:
        ValueError: 轴向为零向量
    """
    x = np.asarray(axis, dtype=np.float64).reshape(3)
    norm = np.linalg.norm(x)
    if norm <= 0.0 or not np.isfinite(norm):
        raise ValueError(f"Cannot normalize frame around axis {x}")
    x = x / norm

    smallest = 0
    for i in range(3):
        if abs(x[i]) < abs(x[smallest]):
            smallest = i

    y = np.zeros(3)
    y[smallest] = 1.0
    z = np.cross(x, y)
    z /= np.linalg.norm(z)
    y = np.cross(z, x)

    return np.column_stack((x, y, z))


def normalize_frame_orientation(joint: Optional[JointSpec]) -> np.ndarray:
    """
    计算关节坐标系归一化变换

    返回的4x4矩阵旋转部分的第一列为关节轴向, 平移为零。
    关节为空或轴向非法时退化为单位矩阵并发出警告(可恢复, 不中断构建)。

    Args:
        joint: URDF关节

    Returns:
        N: 归一化变换 [4, 4]
    """
    result = np.eye(4)
    if joint is None:
        warnings.warn("Null joint in normalize_frame_orientation", BuildWarning, stacklevel=2)
        return result

    try:
        result[:3, :3] = axis_frame(joint.axis)
    except ValueError as e:
        warnings.warn(f"Joint {joint.name}: {e}, using identity", BuildWarning, stacklevel=2)
    return result
