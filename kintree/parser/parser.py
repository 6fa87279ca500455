"""
运动学树解析器

把不可变的输入图提升为带归一化坐标系的运动学树:
    输入图 -> 关节工厂 + 位姿解析 (逐关节)
           -> 树组装 (拓扑)
           -> 惯性 + 几何体附着 (逐关节)
           -> 解剖学角色与末端执行器
每次解析前清空内部状态, 同一个 Parser 实例可以重复使用。
"""

import warnings
from typing import List, Optional

import numpy as np

from ..errors import BuildError, BuildResult, BuildWarning, ErrorKind
from ..model.humanoid import AnatomyRole, RobotModel
from ..model.joint import KinematicTree
from ..robot.description import RobotDescription
from ..robot.frames import normalize_frame_orientation
from ..robot.resources import ResourceRetriever
from ..robot.urdf import description_from_string
from .anatomy import AnatomyResolver
from .assembler import TreeAssembler
from .config import ParserConfig
from .factory import JointFactory
from .geometry import GeometryResolver
from .inertia import BodyAttacher
from .pose import PoseResolver


class Parser:
    """
    URDF -> 运动学树解析器

    Attributes:
        config: 解析配置
        retriever: 外部资源获取器 (uri -> bytes)
        model: 最近一次成功构建的结果 (失败时为None)
    """

    def __init__(self, config: Optional[ParserConfig] = None,
                 retriever: Optional[ResourceRetriever] = None):
        self.config = config or ParserConfig()
        self.retriever = retriever or ResourceRetriever()
        self.model: Optional[RobotModel] = None
        self._reset()

    def _reset(self):
        self.description: Optional[RobotDescription] = None
        self.tree = KinematicTree()
        self.factory = JointFactory(self.tree)
        self.root_link_name = self.config.root_link_name
        self.model = None

    # ------------------------------------------------------------------
    # 入口
    # ------------------------------------------------------------------

    def parse(self, uri: str) -> RobotModel:
        """
        通过资源获取器读取URDF并构建

        Args:
            uri: 文件路径, file:// 或 package:// 资源

        Returns:
            RobotModel
        """
        return self.parse_string(self.retriever.read_text(uri))

    def parse_string(self, robot_description: str) -> RobotModel:
        """从URDF文本构建"""
        return self.parse_description(description_from_string(robot_description))

    def parse_description(self, description: RobotDescription) -> RobotModel:
        """
        从输入图构建运动学树

        可恢复的问题以 BuildWarning 发出并记录在 model.warnings 中。

        Raises:
            BuildError: 结构性错误, 此时不会保留任何部分结果
        """
        self._reset()
        caught = []
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                model = self._build(description)
        except Exception:
            self._reset()
            raise
        finally:
            messages = self._reemit(caught)

        model.warnings = messages
        self.model = model
        return model

    def try_parse_description(self, description: RobotDescription) -> BuildResult:
        """与 parse_description 相同, 但以 BuildResult 返回而不抛出异常"""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", BuildWarning)
            try:
                model = self.parse_description(description)
            except BuildError as e:
                return BuildResult(error=e, warnings=[str(w.message) for w in caught])
        return BuildResult(model=model, warnings=list(model.warnings))

    @staticmethod
    def _reemit(caught) -> List[str]:
        messages = []
        for w in caught:
            if issubclass(w.category, BuildWarning):
                messages.append(str(w.message))
        # 在外层过滤器下重新发出
        for w in caught:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
        return messages

    # ------------------------------------------------------------------
    # 构建步骤
    # ------------------------------------------------------------------

    def _build(self, description: RobotDescription) -> RobotModel:
        config = self.config
        self.description = description
        depth = config.depth_limit(description.n_joints)

        if description.get_link(config.root_link_name) is None:
            warnings.warn(f"No link named {config.root_link_name}, "
                          f"using root link {description.root_link}", BuildWarning)
            self.root_link_name = description.root_link

        self.parse_joints(PoseResolver(description, max_depth=depth))

        assembler = TreeAssembler(description, self.tree, self.root_link_name, max_depth=depth)
        assembler.connect()
        for joint in self.tree.prune():
            warnings.warn(f"Joint {joint.name} is not reachable from root link "
                          f"{self.root_link_name}, dropped", BuildWarning)

        model = RobotModel(name=description.name, tree=self.tree)

        if config.resolve_anatomy:
            anatomy = AnatomyResolver(config.anatomy_links, config.root_joint_name)
            model.anatomy = anatomy.find_special_joints(description)
            anatomy.set_special_joints(model.anatomy, self.tree)

        self.add_bodies_to_joints(model)
        self.assign_configuration_ranks()

        if config.resolve_anatomy:
            self.fill_gaze(model, anatomy)
            self.fill_hands_and_feet(model, anatomy)

        if config.bound_free_flyer:
            self.set_free_flyer_bounds()

        return model

    def parse_joints(self, resolver: PoseResolver):
        """
        创建根浮动关节以及文档中每个关节对应的 JointNode

        驱动关节 (revolute/continuous/prismatic) 的坐标系归一化为绕X轴运动。
        """
        config = self.config
        root = self.factory.create_freeflyer_joint(config.root_joint_name, np.eye(4),
                                                   link_name=self.root_link_name)
        self.tree.root = root.index

        for name, spec in self.description.joints.items():
            position = resolver.resolve(config.reference_joint_name, name)
            normalization = np.eye(4)
            if spec.kind.is_actuated:
                normalization = normalize_frame_orientation(spec)
                position = position @ normalization
            joint = self.factory.create(spec.kind, name, position, spec.limits,
                                        link_name=spec.child_link)
            joint.normalization = normalization

    def add_bodies_to_joints(self, model: RobotModel):
        """
        为每个关节附着惯性参数和几何体

        几何体失败只记录在 model.geometry_errors 中, 不影响其他链接。
        """
        config = self.config
        attacher = BodyAttacher(self.description, config.root_joint_name, self.root_link_name)
        fetch = self.retriever.read_bytes if config.load_mesh_data else None
        resolver = GeometryResolver(self.root_link_name, config.cylinder_axis_rotation, fetch)

        for joint in self.tree:
            link = attacher.link_of(joint)
            joint.body = attacher.compute_body(joint, link)
            try:
                joint.geometries = resolver.resolve(link, joint)
            except BuildError as e:
                warnings.warn(f"Could not add solid component to joint {joint.name}: {e}",
                              BuildWarning)
                model.geometry_errors.append(e)

    def assign_configuration_ranks(self):
        """按先序遍历分配配置向量下标"""
        rank = 0
        for joint in self.tree.walk():
            joint.rank_in_configuration = rank
            rank += joint.dof

    def fill_gaze(self, model: RobotModel, anatomy: AnatomyResolver):
        model.gaze = anatomy.compute_gaze(self.tree, model.anatomy.gaze_joint_name,
                                          self.config.gaze_direction, self.config.gaze_origin)

    def fill_hands_and_feet(self, model: RobotModel, anatomy: AnatomyResolver):
        registry = model.anatomy
        model.left_hand = anatomy.compute_hand(
            self.tree, registry.get(AnatomyRole.LEFT_WRIST),
            registry.get(AnatomyRole.LEFT_HAND), 'left')
        model.right_hand = anatomy.compute_hand(
            self.tree, registry.get(AnatomyRole.RIGHT_WRIST),
            registry.get(AnatomyRole.RIGHT_HAND), 'right')
        model.left_foot = anatomy.compute_foot(
            self.tree, registry.get(AnatomyRole.LEFT_ANKLE),
            registry.get(AnatomyRole.LEFT_FOOT), 'left')
        model.right_foot = anatomy.compute_foot(
            self.tree, registry.get(AnatomyRole.RIGHT_ANKLE),
            registry.get(AnatomyRole.RIGHT_FOOT), 'right')

    def set_free_flyer_bounds(self):
        """平移和偏航无界, 横滚/俯仰限制在 ±free_flyer_rotation_bound"""
        root = self.tree.root_joint
        if root is None or root.dof != 6:
            raise BuildError(ErrorKind.MISSING_PARENT, "Root joint is not a free flyer")
        limit = self.config.free_flyer_rotation_bound
        for i in (0, 1, 2, 5):
            root.bounds[i].unbound()
        for i in (3, 4):
            root.bounds[i].set_bounds(-limit, limit)
