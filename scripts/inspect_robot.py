#!/usr/bin/env python3
"""
运动学树检查脚本

解析URDF, 打印运动学树、驱动关节和末端执行器信息, 可选绘图。

用法:
    python scripts/inspect_robot.py --urdf robots/humanoid.urdf
    python scripts/inspect_robot.py --urdf package://my_robot/urdf/robot.urdf --plot tree.png
    python scripts/inspect_robot.py --urdf robots/arm.urdf --manipulator
"""

import os
import sys
import json
import argparse

# 添加项目路径
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from kintree import BuildError, Parser, ParserConfig
from kintree.robot import ResourceRetriever


def parse_args():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="解析URDF并检查运动学树",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--urdf',
        type=str,
        required=True,
        help='URDF 文件路径或 package:// 资源'
    )

    parser.add_argument(
        '--package-path',
        type=str,
        action='append',
        default=None,
        help='package:// 搜索路径 (可多次指定, 默认使用 ROS_PACKAGE_PATH)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='ParserConfig JSON 文件'
    )

    parser.add_argument(
        '--manipulator',
        action='store_true',
        help='固定基座机械臂: 不解析解剖学角色, 根关节不加限位'
    )

    parser.add_argument(
        '--plot',
        type=str,
        default=None,
        help='保存运动学树图像的路径'
    )

    return parser.parse_args()


def main():
    args = parse_args()

    if args.config:
        with open(args.config) as f:
            config = ParserConfig.from_dict(json.load(f))
    elif args.manipulator:
        config = ParserConfig.manipulator_default()
    else:
        config = ParserConfig.humanoid_default()

    parser = Parser(config, ResourceRetriever(args.package_path))
    try:
        model = parser.parse(args.urdf)
    except (BuildError, FileNotFoundError) as e:
        print(f"✗ 解析失败: {e}")
        return 1

    print("\n" + "=" * 60)
    model.print_tree()
    print("=" * 60)
    model.display_actuated_joints()
    if config.resolve_anatomy:
        model.display_end_effectors()

    if model.geometry_errors:
        print(f"\n{len(model.geometry_errors)} 个链接的几何体未能附着:")
        for error in model.geometry_errors:
            print(f"  - {error}")

    if model.warnings:
        print(f"\n{len(model.warnings)} 条警告")

    if args.plot:
        from kintree.visualization import plot_kinematic_tree
        plot_kinematic_tree(model, save_path=args.plot)

    print(f"\n✓ 完成: {model.name}: {model.n_joints} 个关节, "
          f"{len(model.actuated_joints)} 个驱动关节, 配置维度 {model.config_size}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
