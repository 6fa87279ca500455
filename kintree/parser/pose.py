"""
位姿解析模块

沿输入图向上遍历, 把各关节的 parent_to_joint_origin 变换依次左乘,
得到目标关节在参考关节坐标系(或世界坐标系)中的位姿。
"""

from typing import List, Optional, Set

import numpy as np

from ..errors import BuildError, ErrorKind
from ..robot.description import JointSpec, RobotDescription


class PoseResolver:
    """
    关节位姿解析器

    composed = resolve(reference, parent_joint) @ origin(target)
    遇到参考关节、根链接或找不到父链接时停止。
    """

    def __init__(self, description: RobotDescription, max_depth: Optional[int] = None):
        """
        Args:
            description: 输入图
            max_depth: 向上遍历的最大深度 (None表示关节数量+1)
        """
        self.description = description
        self.max_depth = max_depth if max_depth is not None else description.n_joints + 1

    def _joint(self, name: str) -> JointSpec:
        joint = self.description.get_joint(name)
        if joint is None:
            raise BuildError(ErrorKind.MISSING_PARENT,
                             f"Failed to retrieve joint {name} while computing joint position",
                             name=name)
        return joint

    def chain(self, reference: Optional[str], target: str) -> List[JointSpec]:
        """
        从target向上到参考关节(含)或根为止的关节链

        Returns:
            关节列表, 顺序为从上到下 (最后一个为target)

        Raises:
            BuildError: 关节不存在 (MISSING_PARENT) 或输入图存在环 (CYCLIC_GRAPH)
        """
        joints: List[JointSpec] = []
        visited: Set[str] = set()
        current = self._joint(target)
        while True:
            if current.name in visited or len(joints) >= self.max_depth:
                raise BuildError(ErrorKind.CYCLIC_GRAPH,
                                 f"Cycle detected above joint {target} at {current.name}",
                                 name=target)
            visited.add(current.name)
            joints.append(current)

            if current.name == reference:
                break
            parent_link = self.description.get_link(current.parent_link)
            if parent_link is None or parent_link.parent_joint is None:
                break
            current = self._joint(parent_link.parent_joint)

        joints.reverse()
        return joints

    def resolve(self, reference: Optional[str], target: str) -> np.ndarray:
        """
        计算target在reference坐标系中的位姿

        reference 等于 target 时返回该关节自身的 origin 变换;
        reference 不在链上(或为None)时一直组合到根链接。

        Args:
            reference: 参考关节名称
            target: 目标关节名称

        Returns:
            T: 位姿 [4, 4]
        """
        T = np.eye(4)
        for joint in self.chain(reference, target):
            T = T @ joint.origin
        return T
