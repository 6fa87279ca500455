"""
资源获取模块

把 package:// 、file:// 以及普通路径解析为本地文件并读取内容。
package:// 通过搜索路径(默认取自 ROS_PACKAGE_PATH)定位功能包目录。
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence


class ResourceRetriever:
    """
    资源获取器

    Attributes:
        search_paths: package:// 的搜索根目录列表
    """

    def __init__(self, search_paths: Optional[Sequence[str]] = None):
        if search_paths is None:
            env = os.environ.get('ROS_PACKAGE_PATH', '')
            search_paths = [p for p in env.split(os.pathsep) if p]
        self.search_paths: List[Path] = [Path(p) for p in search_paths]

    def resolve(self, uri: str) -> Path:
        """
        资源URI -> 本地路径

        Raises:
            FileNotFoundError: 找不到对应文件或功能包
        """
        if uri.startswith('package://'):
            package, _, relative = uri[len('package://'):].partition('/')
            for root in self.search_paths:
                # 支持 <root>/<package> 以及 <root> 本身就是功能包目录
                package_dir = root if root.name == package else root / package
                candidate = package_dir / relative
                if candidate.exists():
                    return candidate
            raise FileNotFoundError(f"Could not resolve {uri} in {self.search_paths}")

        path = Path(uri[len('file://'):]) if uri.startswith('file://') else Path(uri)
        if not path.exists():
            raise FileNotFoundError(f"Resource not found: {uri}")
        return path

    def read_bytes(self, uri: str) -> bytes:
        return self.resolve(uri).read_bytes()

    def read_text(self, uri: str) -> str:
        return self.read_bytes(uri).decode('utf-8')

    def __call__(self, uri: str) -> bytes:
        return self.read_bytes(uri)
