"""
正运动学模块

在构建好的运动学树上, 基于PyTorch计算各关节的世界位姿, 支持批量计算和自动微分。
归一化后的驱动关节都绕(沿)局部X轴运动; 根浮动关节使用
q[0:3] 平移和 q[3:6] roll/pitch/yaw。
"""

from typing import TYPE_CHECKING, Dict, Optional, Union

import numpy as np
import torch

from .description import JointKind

if TYPE_CHECKING:
    from ..model.humanoid import RobotModel


class ForwardKinematics:
    """
    运动学树正运动学计算器

    q = 0 时每个关节的位姿等于其初始绝对位姿。
    """

    def __init__(self, model: 'RobotModel', device: str = 'cpu', dtype: torch.dtype = torch.float64):
        """
        初始化FK计算器

        Args:
            model: 构建结果
            device: 计算设备 ('cpu' 或 'cuda')
            dtype: 计算精度
        """
        self.model = model
        self.device = device
        self.dtype = dtype
        self.config_size = model.config_size

        # 先序遍历保证父节点先于子节点计算
        self.order = list(model.tree.walk())
        self._precompute_transforms()

    def _precompute_transforms(self):
        """预计算父关节 -> 子关节的固定变换"""
        self.local_transforms: Dict[int, torch.Tensor] = {}
        for joint in self.order:
            parent = self.model.tree.parent_of(joint)
            if parent is None:
                local = joint.position
            else:
                local = np.linalg.inv(parent.position) @ joint.position
            self.local_transforms[joint.index] = torch.tensor(
                local, dtype=self.dtype, device=self.device)

    def _eye(self, batch_size: int) -> torch.Tensor:
        return torch.eye(4, device=self.device, dtype=self.dtype).unsqueeze(0).repeat(batch_size, 1, 1)

    def _rotation_x(self, angle: torch.Tensor) -> torch.Tensor:
        """绕X轴旋转 [batch_size, 4, 4]"""
        T = self._eye(angle.shape[0])
        c, s = torch.cos(angle), torch.sin(angle)
        T[:, 1, 1] = c
        T[:, 1, 2] = -s
        T[:, 2, 1] = s
        T[:, 2, 2] = c
        return T

    def _rotation_y(self, angle: torch.Tensor) -> torch.Tensor:
        T = self._eye(angle.shape[0])
        c, s = torch.cos(angle), torch.sin(angle)
        T[:, 0, 0] = c
        T[:, 0, 2] = s
        T[:, 2, 0] = -s
        T[:, 2, 2] = c
        return T

    def _rotation_z(self, angle: torch.Tensor) -> torch.Tensor:
        T = self._eye(angle.shape[0])
        c, s = torch.cos(angle), torch.sin(angle)
        T[:, 0, 0] = c
        T[:, 0, 1] = -s
        T[:, 1, 0] = s
        T[:, 1, 1] = c
        return T

    def _translation(self, offset: torch.Tensor) -> torch.Tensor:
        """平移 offset: [batch_size, 3]"""
        T = self._eye(offset.shape[0])
        T[:, :3, 3] = offset
        return T

    def _joint_motion(self, kind: JointKind, q: torch.Tensor) -> Optional[torch.Tensor]:
        """
        关节运动变换

        Args:
            kind: 关节类型
            q: 该关节的配置分量 [batch_size, dof]
        """
        if kind in (JointKind.REVOLUTE, JointKind.CONTINUOUS):
            return self._rotation_x(q[:, 0])
        if kind == JointKind.PRISMATIC:
            zeros = torch.zeros_like(q[:, 0])
            return self._translation(torch.stack([q[:, 0], zeros, zeros], dim=1))
        if kind == JointKind.FLOATING:
            T = self._translation(q[:, 0:3])
            # 固定轴 roll/pitch/yaw: R = Rz · Ry · Rx
            R = torch.bmm(self._rotation_z(q[:, 5]),
                          torch.bmm(self._rotation_y(q[:, 4]), self._rotation_x(q[:, 3])))
            return torch.bmm(T, R)
        return None

    def compute(self, q: Union[np.ndarray, torch.Tensor]) -> Dict[str, torch.Tensor]:
        """
        计算所有关节的世界位姿

        Args:
            q: 配置向量, shape: [config_size] 或 [batch_size, config_size]

        Returns:
            关节名称 -> 位姿 [batch_size, 4, 4] (输入为1维时为 [4, 4])
        """
        if isinstance(q, np.ndarray):
            q = torch.from_numpy(q)
        q = q.to(device=self.device, dtype=self.dtype)

        if q.dim() == 1:
            q = q.unsqueeze(0)
            squeeze_output = True
        else:
            squeeze_output = False

        if q.shape[1] != self.config_size:
            raise ValueError(f"Expected configuration of size {self.config_size}, got {q.shape[1]}")

        batch_size = q.shape[0]
        world: Dict[int, torch.Tensor] = {}
        for joint in self.order:
            local = self.local_transforms[joint.index].unsqueeze(0).expand(batch_size, -1, -1)
            if joint.parent is None:
                T = local
            else:
                T = torch.bmm(world[joint.parent], local)

            if joint.dof > 0:
                rank = joint.rank_in_configuration
                motion = self._joint_motion(joint.kind, q[:, rank:rank + joint.dof])
                if motion is not None:
                    T = torch.bmm(T, motion)
            world[joint.index] = T

        poses = {}
        for joint in self.order:
            T = world[joint.index]
            poses[joint.name] = T.squeeze(0) if squeeze_output else T
        return poses

    def joint_position(self, q: Union[np.ndarray, torch.Tensor], joint_name: str) -> torch.Tensor:
        """
        指定关节的世界坐标位置

        Returns:
            position: [3] 或 [batch_size, 3]
        """
        if self.model.find_joint(joint_name) is None:
            raise ValueError(f"Joint {joint_name} not found in kinematic tree")
        T = self.compute(q)[joint_name]
        return T[..., :3, 3]


def compute_fk(model: 'RobotModel', q: Union[np.ndarray, torch.Tensor],
               device: str = 'cpu') -> Dict[str, torch.Tensor]:
    """
    便捷函数:计算正运动学

    Args:
        model: 构建结果
        q: 配置向量
        device: 计算设备

    Returns:
        关节名称 -> 世界位姿
    """
    return ForwardKinematics(model, device).compute(q)
