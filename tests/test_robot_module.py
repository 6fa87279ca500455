"""
Robot 模块单元测试

测试输入图校验、坐标系归一化、URDF解码、资源获取和正运动学功能。
"""

import unittest
import os
import sys
import tempfile
import warnings
import numpy as np
import torch
from scipy.spatial.transform import Rotation

# 设置随机种子以确保测试可重复
SEED = 42
np.random.seed(SEED)
torch.manual_seed(SEED)

# 添加项目根目录到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from kintree import BuildError, BuildWarning, ErrorKind, Parser, ParserConfig
from kintree.util import load_robot_model, load_urdf_model
from kintree.robot import (
    ForwardKinematics,
    JointKind,
    JointSpec,
    LinkNode,
    MeshGeometry,
    ResourceRetriever,
    RobotDescription,
    axis_frame,
    compute_fk,
    description_from_string,
    invert_pose,
    load_description,
    normalize_frame_orientation,
    pose_matrix,
)

from robot_fixtures import (
    HUMANOID_URDF,
    PLANAR_URDF,
    revolute_with_child_robot,
    serial_chain_robot,
)


def build(description, config=None):
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', BuildWarning)
        return Parser(config).parse_description(description)


class TestRobotDescription(unittest.TestCase):
    """测试输入图的结构校验"""

    def test_links_and_children(self):
        description = serial_chain_robot()

        self.assertEqual(description.root_link, 'l0')
        self.assertEqual(description.n_links, 4)
        self.assertEqual(description.n_joints, 3)
        self.assertEqual(description.links['l1'].parent_joint, 'A')
        self.assertEqual(description.links['l1'].child_joints, ('B',))
        self.assertIsNone(description.get_link(None))
        self.assertIsNone(description.get_joint('missing'))

        print(f"✓ 输入图校验通过: {description}")

    def test_immutable(self):
        description = serial_chain_robot()
        with self.assertRaises(TypeError):
            description.joints['D'] = None
        with self.assertRaises(ValueError):
            description.joints['A'].origin[0, 3] = 5.0

        print("✓ 输入图不可修改")

    def test_duplicate_joint(self):
        links = [LinkNode('a'), LinkNode('b'), LinkNode('c')]
        joints = [JointSpec('j', JointKind.FIXED, 'a', 'b'),
                  JointSpec('j', JointKind.FIXED, 'b', 'c')]
        with self.assertRaises(ValueError):
            RobotDescription('dup', links, joints)

        print("✓ 重复关节名称被拒绝")

    def test_unknown_link_reference(self):
        with self.assertRaises(ValueError):
            RobotDescription('bad', [LinkNode('a')],
                             [JointSpec('j', JointKind.FIXED, 'a', 'ghost')])

        print("✓ 未知链接引用被拒绝")

    def test_two_parent_joints(self):
        links = [LinkNode('a'), LinkNode('b')]
        joints = [JointSpec('j1', JointKind.FIXED, 'a', 'b'),
                  JointSpec('j2', JointKind.FIXED, 'a', 'b')]
        with self.assertRaises(ValueError):
            RobotDescription('bad', links, joints)

        print("✓ 链接有两个父关节被拒绝")

    def test_several_roots(self):
        with self.assertRaises(ValueError):
            RobotDescription('forest', [LinkNode('a'), LinkNode('b')], [])

        print("✓ 多个根链接被拒绝")

    def test_joint_kind_from_string(self):
        self.assertEqual(JointKind.from_string('Revolute'), JointKind.REVOLUTE)
        self.assertEqual(JointKind.from_string('weird'), JointKind.UNKNOWN)
        self.assertTrue(JointKind.PRISMATIC.is_actuated)
        self.assertFalse(JointKind.FIXED.is_actuated)

        print("✓ 关节类型字符串解析")


class TestFrames(unittest.TestCase):
    """测试坐标系工具与关节坐标系归一化"""

    def test_axis_frame_known_axes(self):
        """z轴和y轴的归一化结果"""
        R = axis_frame((0, 0, 1))
        np.testing.assert_allclose(R[:, 0], [0, 0, 1])
        np.testing.assert_allclose(R[:, 1], [1, 0, 0])
        np.testing.assert_allclose(R[:, 2], [0, 1, 0])

        R = axis_frame((0, 1, 0))
        np.testing.assert_allclose(R[:, 0], [0, 1, 0])
        np.testing.assert_allclose(R[:, 1], [1, 0, 0])
        np.testing.assert_allclose(R[:, 2], [0, 0, -1])

        np.testing.assert_allclose(axis_frame((1, 0, 0)), np.eye(3))

        print("✓ 坐标轴归一化")

    def test_axis_frame_random(self):
        """任意轴向: 正交、行列式为1、第一列为归一化轴向"""
        for _ in range(100):
            axis = np.random.randn(3) * np.random.uniform(0.01, 10.0)
            R = axis_frame(axis)
            np.testing.assert_allclose(R.T @ R, np.eye(3), atol=1e-12)
            self.assertAlmostEqual(np.linalg.det(R), 1.0, places=12)
            np.testing.assert_allclose(R[:, 0], axis / np.linalg.norm(axis), atol=1e-12)

        print("✓ 随机轴向归一化验证通过 (100个)")

    def test_axis_frame_not_unit(self):
        np.testing.assert_allclose(axis_frame((0, 0, 5)), axis_frame((0, 0, 1)))

        print("✓ 非单位轴向")

    def test_zero_axis(self):
        with self.assertRaises(ValueError):
            axis_frame((0, 0, 0))

        joint = JointSpec('j', JointKind.REVOLUTE, 'a', 'b', axis=(0, 0, 0))
        with self.assertWarns(BuildWarning):
            N = normalize_frame_orientation(joint)
        np.testing.assert_allclose(N, np.eye(4))

        print("✓ 零轴向退化为单位矩阵")

    def test_null_joint(self):
        with self.assertWarns(BuildWarning):
            N = normalize_frame_orientation(None)
        np.testing.assert_allclose(N, np.eye(4))

        print("✓ 空关节返回单位矩阵")

    def test_normalization_has_no_translation(self):
        joint = JointSpec('j', JointKind.REVOLUTE, 'a', 'b', axis=(1, 1, 0),
                          origin=pose_matrix((1, 2, 3)))
        N = normalize_frame_orientation(joint)
        np.testing.assert_allclose(N[:3, 3], 0.0)
        np.testing.assert_allclose(N[3], [0, 0, 0, 1])

        print("✓ 归一化变换不含平移")

    def test_pose_matrix_and_inverse(self):
        rpy = (0.3, -0.2, 1.1)
        T = pose_matrix((1, 2, 3), rpy=rpy)
        expected = Rotation.from_euler('xyz', rpy).as_matrix()
        np.testing.assert_allclose(T[:3, :3], expected)
        np.testing.assert_allclose(T @ invert_pose(T), np.eye(4), atol=1e-12)

        quat = Rotation.from_euler('xyz', rpy).as_quat()
        np.testing.assert_allclose(pose_matrix((1, 2, 3), quaternion=quat), T, atol=1e-12)

        print("✓ 位姿矩阵与求逆")


class TestURDFDecoding(unittest.TestCase):
    """测试基于 yourdfpy 的URDF解码"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, relative, text):
        path = os.path.join(self.tmp.name, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def test_decode_humanoid(self):
        description = description_from_string(HUMANOID_URDF)

        self.assertEqual(description.name, 'mini_humanoid')
        self.assertEqual(description.root_link, 'base_link')
        self.assertEqual(list(description.joints),
                         ['torso_joint', 'l_wrist_joint', 'l_gripper_joint'])

        wrist = description.joints['l_wrist_joint']
        self.assertEqual(wrist.kind, JointKind.REVOLUTE)
        np.testing.assert_allclose(wrist.axis, [0, 1, 0])
        self.assertEqual((wrist.limits.lower, wrist.limits.upper), (-1.0, 1.0))
        self.assertEqual((wrist.limits.velocity, wrist.limits.effort), (2.0, 5.0))

        base = description.links['base_link']
        self.assertAlmostEqual(base.inertial.mass, 5.0)
        np.testing.assert_allclose(base.inertial.center_of_mass, [0, 0, 0.05])

        gripper = description.links['l_gripper']
        self.assertIsInstance(gripper.visual.geometry, MeshGeometry)
        self.assertEqual(gripper.visual.geometry.filename, 'package://mini/meshes/gripper.dae')

        print(f"✓ URDF解码成功: {description}")

    def test_build_from_urdf_text(self):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', BuildWarning)
            model = Parser().parse_string(HUMANOID_URDF)

        self.assertEqual(model.n_joints, 4)
        self.assertEqual(model.config_size, 7)
        kinds = [type(g).__name__ for g in model.geometries]
        self.assertEqual(kinds, ['BoxAttachment', 'CylinderAttachment',
                                 'CapsuleAttachment', 'SegmentAttachment'])

        hand = model.left_hand
        np.testing.assert_allclose(hand.center, [0, 0.1, 0], atol=1e-12)
        np.testing.assert_allclose(hand.thumb_axis, [1, 0, 0], atol=1e-12)
        np.testing.assert_allclose(hand.fore_finger_axis, [0, -1, 0], atol=1e-12)
        np.testing.assert_allclose(hand.palm_normal, [0, 0, -1], atol=1e-12)

        np.testing.assert_allclose(model.root_joint.body.local_com, [0, 0, 0.05])

        print(f"✓ 从URDF文本构建: {model.n_joints} 个关节")

    def test_planar_urdf(self):
        with self.assertRaises(BuildError) as ctx:
            Parser().parse_string(PLANAR_URDF)
        self.assertEqual(ctx.exception.kind, ErrorKind.PLANAR_UNSUPPORTED)

        print(f"✓ PLANAR URDF: {ctx.exception}")

    def test_invalid_xml(self):
        with self.assertRaises(BuildError) as ctx:
            description_from_string('<robot name="broken"><link name=')
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_DESCRIPTION)

        print(f"✓ 非法XML: {ctx.exception}")

    def test_load_description_file(self):
        path = self.write('humanoid.urdf', HUMANOID_URDF)
        description = load_description(path)
        self.assertEqual(description.n_joints, 3)

        print(f"✓ 从文件加载: {description}")

    def test_file_not_found(self):
        """测试文件不存在的情况"""
        with self.assertRaises(FileNotFoundError):
            load_description('nonexistent.urdf')

        print("✓ 文件不存在时抛出异常")


class TestResources(unittest.TestCase):
    """测试 package:// 资源获取与加载辅助函数"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        urdf_dir = os.path.join(self.tmp.name, 'mini', 'urdf')
        os.makedirs(urdf_dir)
        self.urdf_path = os.path.join(urdf_dir, 'mini.urdf')
        with open(self.urdf_path, 'w') as f:
            f.write(HUMANOID_URDF)

    def test_resolve_package(self):
        retriever = ResourceRetriever([self.tmp.name])
        path = retriever.resolve('package://mini/urdf/mini.urdf')
        self.assertEqual(os.path.realpath(str(path)), os.path.realpath(self.urdf_path))

        # 搜索路径本身就是功能包目录
        retriever = ResourceRetriever([os.path.join(self.tmp.name, 'mini')])
        self.assertEqual(retriever.read_text('package://mini/urdf/mini.urdf'), HUMANOID_URDF)

        print(f"✓ package:// 解析: {path}")

    def test_resolve_file_uri(self):
        retriever = ResourceRetriever([])
        self.assertEqual(retriever(f'file://{self.urdf_path}'), HUMANOID_URDF.encode('utf-8'))

        print("✓ file:// 解析")

    def test_missing_resource(self):
        retriever = ResourceRetriever([self.tmp.name])
        with self.assertRaises(FileNotFoundError):
            retriever.resolve('package://other/urdf/mini.urdf')
        with self.assertRaises(FileNotFoundError):
            retriever.resolve(os.path.join(self.tmp.name, 'nothing.urdf'))

        print("✓ 缺失资源抛出异常")

    def test_load_urdf_model(self):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', BuildWarning)
            model = load_urdf_model('mini', 'mini', search_paths=[self.tmp.name])
            model2, srdf = load_robot_model('mini', 'mini', srdf_suffix='_full',
                                            config=ParserConfig.manipulator_default(),
                                            search_paths=[self.tmp.name])

        self.assertEqual(model.name, 'mini_humanoid')
        self.assertEqual(model2.n_joints, model.n_joints)
        self.assertEqual(srdf, 'package://mini/srdf/mini_full.srdf')

        print(f"✓ package:// 加载成功: {model.n_joints} 个关节")


class TestForwardKinematics(unittest.TestCase):
    """测试正运动学计算"""

    def setUp(self):
        """设置测试环境"""
        np.random.seed(SEED)
        torch.manual_seed(SEED)
        self.model = build(revolute_with_child_robot())
        self.fk = ForwardKinematics(self.model, 'cpu')

    def test_zero_configuration(self):
        """q = 0 时各关节位姿等于初始位姿"""
        poses = self.fk.compute(torch.zeros(self.model.config_size, dtype=torch.float64))
        for joint in self.model.tree:
            np.testing.assert_allclose(poses[joint.name].numpy(), joint.position, atol=1e-12)

        print("✓ 零配置FK验证通过")

    def test_revolute_motion(self):
        """z轴旋转关节转90°后, 末端从 (1,0,0.5) 移动到 (0,1,0.5)"""
        q = np.zeros(self.model.config_size)
        q[self.model.find_joint('j1').rank_in_configuration] = np.pi / 2
        tip = self.fk.joint_position(q, 'tip')
        np.testing.assert_allclose(tip.numpy(), [0, 1, 0.5], atol=1e-12)

        print(f"✓ 旋转后末端位置: {tip.numpy()}")

    def test_root_translation(self):
        q = np.zeros(self.model.config_size)
        q[0:3] = [1.0, 2.0, 3.0]
        poses = compute_fk(self.model, q)
        np.testing.assert_allclose(poses['tip'][:3, 3].numpy(), [2.0, 2.0, 3.5], atol=1e-12)

        print("✓ 根平移FK验证通过")

    def test_batch(self):
        batch_size = 10
        q = torch.randn(batch_size, self.model.config_size, dtype=torch.float64) * 0.5
        poses = self.fk.compute(q)
        self.assertEqual(poses['tip'].shape, (batch_size, 4, 4))

        R = poses['tip'][:, :3, :3]
        eye = torch.eye(3, dtype=torch.float64).expand(batch_size, 3, 3)
        self.assertTrue(torch.allclose(R.transpose(1, 2) @ R, eye, atol=1e-10))

        print(f"✓ 批量FK: batch_size={batch_size}")

    def test_gradient(self):
        """测试FK的梯度计算(自动微分)"""
        q = torch.zeros(self.model.config_size, dtype=torch.float64, requires_grad=True)
        tip = self.fk.joint_position(q, 'tip')
        tip[1].backward()

        self.assertIsNotNone(q.grad, "FK应该支持自动微分")
        self.assertAlmostEqual(q.grad[self.model.find_joint('j1').rank_in_configuration].item(), 1.0)

        print("✓ FK梯度计算通过")

    def test_size_mismatch(self):
        with self.assertRaises(ValueError):
            self.fk.compute(torch.zeros(3))
        with self.assertRaises(ValueError):
            self.fk.joint_position(np.zeros(self.model.config_size), 'nope')

        print("✓ 配置维度不匹配被拒绝")


class TestVisualization(unittest.TestCase):
    """测试运动学树绘图"""

    def test_plot_kinematic_tree(self):
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from kintree.visualization import plot_kinematic_tree

        with warnings.catch_warnings():
            warnings.simplefilter('ignore', BuildWarning)
            model = Parser().parse_string(HUMANOID_URDF)

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'tree.png')
            fig = plot_kinematic_tree(model, save_path=path)
            self.assertTrue(os.path.exists(path))
        plt.close(fig)

        print("✓ 运动学树绘图")


def run_tests():
    """运行所有测试"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestRobotDescription))
    suite.addTests(loader.loadTestsFromTestCase(TestFrames))
    suite.addTests(loader.loadTestsFromTestCase(TestURDFDecoding))
    suite.addTests(loader.loadTestsFromTestCase(TestResources))
    suite.addTests(loader.loadTestsFromTestCase(TestForwardKinematics))
    suite.addTests(loader.loadTestsFromTestCase(TestVisualization))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    success = run_tests()
    sys.exit(0 if success else 1)
