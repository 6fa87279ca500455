"""
Parser 模块：输入图 -> 运动学树

- pose: 位姿解析
- factory: 关节工厂与名称注册表
- assembler: 树组装
- inertia: 惯性参数附着
- geometry: 几何体附着解析
- anatomy: 解剖学角色与末端执行器
- parser: 整体流程
"""

from .config import ParserConfig, default_anatomy_links
from .pose import PoseResolver
from .factory import JointFactory
from .assembler import TreeAssembler
from .inertia import BodyAttacher, reexpress_inertia
from .geometry import GeometryResolver
from .anatomy import AnatomyResolver
from .parser import Parser

__all__ = [
    'ParserConfig',
    'default_anatomy_links',
    'PoseResolver',
    'JointFactory',
    'TreeAssembler',
    'BodyAttacher',
    'reexpress_inertia',
    'GeometryResolver',
    'AnatomyResolver',
    'Parser',
]
