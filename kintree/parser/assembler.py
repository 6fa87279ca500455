"""
运动学树组装模块

从根关节出发, 沿输入图的子链接递归连接已登记的关节。
没有对应登记关节的中间关节会被透明跳过, 直到找到下一个真实关节。
"""

from typing import List, Optional, Set

from ..errors import BuildError, ErrorKind
from ..model.joint import JointNode, KinematicTree
from ..robot.description import RobotDescription


class TreeAssembler:
    """
    树组装器

    Attributes:
        description: 输入图
        tree: JointFactory 填充好的注册表
        root_link_name: 根关节对应的链接
        max_depth: 递归深度上限
    """

    def __init__(self, description: RobotDescription, tree: KinematicTree,
                 root_link_name: str, max_depth: Optional[int] = None):
        self.description = description
        self.tree = tree
        self.root_link_name = root_link_name
        self.max_depth = max_depth if max_depth is not None else description.n_joints + 1

    def _child_link_name(self, joint_name: str) -> str:
        root = self.tree.root_joint
        if root is not None and joint_name == root.name:
            return self.root_link_name
        spec = self.description.get_joint(joint_name)
        if spec is None:
            raise BuildError(ErrorKind.MISSING_PARENT,
                             f"Failed to retrieve children joints of joint {joint_name}",
                             name=joint_name)
        return spec.child_link

    def children_joint_names(self, joint_name: str) -> List[str]:
        """
        joint_name 在逻辑上的直接子关节名称 (按描述文档顺序)

        Raises:
            BuildError: 子链接不存在 (MISSING_LINK) 或输入图存在环 (CYCLIC_GRAPH)
        """
        result: List[str] = []
        self._collect_children(joint_name, result, set())
        return result

    def _collect_children(self, joint_name: str, result: List[str], visited: Set[str]):
        if joint_name in visited or len(visited) > self.max_depth:
            raise BuildError(ErrorKind.CYCLIC_GRAPH,
                             f"Cycle detected while collecting children of {joint_name}",
                             name=joint_name)
        visited.add(joint_name)

        link_name = self._child_link_name(joint_name)
        link = self.description.get_link(link_name)
        if link is None:
            raise BuildError(ErrorKind.MISSING_LINK,
                             f"Failed to retrieve children link {link_name} of joint {joint_name}",
                             name=link_name)

        for child_name in link.child_joints:
            if child_name in self.tree:
                result.append(child_name)
            else:
                self._collect_children(child_name, result, visited)

    def connect(self, joint: Optional[JointNode] = None, depth: int = 0):
        """
        递归连接joint下的所有子关节

        Raises:
            BuildError: 子关节未登记 (MISSING_PARENT), 深度越界/重复连接 (CYCLIC_GRAPH)
        """
        if joint is None:
            joint = self.tree.root_joint
        if depth > self.max_depth:
            raise BuildError(ErrorKind.CYCLIC_GRAPH,
                             f"Maximum tree depth exceeded at joint {joint.name}",
                             name=joint.name)

        for child_name in self.children_joint_names(joint.name):
            child = self.tree.find(child_name)
            if child is None:
                raise BuildError(ErrorKind.MISSING_PARENT,
                                 f"Failed to connect joint {child_name}", name=child_name)
            if child.parent is not None or child.index == self.tree.root:
                raise BuildError(ErrorKind.CYCLIC_GRAPH,
                                 f"Joint {child_name} is connected twice", name=child_name)
            self.tree.attach(joint, child)
            self.connect(child, depth + 1)
