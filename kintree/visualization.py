"""
Visualization Tools

Plot the built kinematic tree: joint origins, parent-child segments and
local joint frames (X red, Y green, Z blue).
"""

from typing import Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from .model.humanoid import RobotModel


def plot_kinematic_tree(
    model: RobotModel,
    frame_scale: float = 0.05,
    show_frames: bool = True,
    save_path: Optional[str] = None,
) -> Figure:
    """
    Plot joint initial positions of a kinematic tree in 3D.

    Args:
        model: Built robot model
        frame_scale: Length of the drawn frame axes
        show_frames: Draw local frames of every joint
        save_path: Optional path to save figure

    Returns:
        Matplotlib Figure object
    """
    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(111, projection='3d')

    tree = model.tree
    for joint in tree.walk():
        p = joint.position[:3, 3]
        parent = tree.parent_of(joint)
        if parent is not None:
            q = parent.position[:3, 3]
            ax.plot([q[0], p[0]], [q[1], p[1]], [q[2], p[2]], color='gray', linewidth=2)

        marker = 'o' if joint.dof > 0 else 's'
        ax.scatter(p[0], p[1], p[2], marker=marker, color='black', s=20)

        if show_frames:
            R = joint.position[:3, :3]
            for axis, color in zip(range(3), ('r', 'g', 'b')):
                end = p + frame_scale * R[:, axis]
                ax.plot([p[0], end[0]], [p[1], end[1]], [p[2], end[2]], color=color)

    # Anatomy roles
    for role, joint_name in model.anatomy.as_dict().items():
        joint = tree.find(joint_name)
        if joint is None:
            continue
        p = joint.position[:3, 3]
        ax.text(p[0], p[1], p[2], role.value, fontsize=8)

    positions = np.array([j.position[:3, 3] for j in tree.walk()])
    if len(positions) > 0:
        center = positions.mean(axis=0)
        radius = max(np.abs(positions - center).max(), frame_scale)
        ax.set_xlim(center[0] - radius, center[0] + radius)
        ax.set_ylim(center[1] - radius, center[1] + radius)
        ax.set_zlim(center[2] - radius, center[2] + radius)

    ax.set_xlabel('X (m)')
    ax.set_ylabel('Y (m)')
    ax.set_zlabel('Z (m)')
    ax.set_title(f'Kinematic Tree: {model.name} ({model.n_joints} joints)')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved kinematic tree plot to {save_path}")

    return fig
