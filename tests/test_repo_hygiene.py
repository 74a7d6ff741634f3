"""仓库约束：tools/ 与 tests/ 的边界，以及工具脚本只依赖稳定入口。

说明：
- tools/ 只放可执行脚本，既不是可 import 的包，也不承载 pytest 配置；
  脚本命名不能匹配 pytest 默认发现模式，避免“工具脚本 vs 单测”语义混淆。
- tools/ 与仓库根 tests/ 代表下游真实依赖面，只允许从 `trajectory_events` 的稳定入口导入：
  包顶层、`trajectory_events.adapters`、`trajectory_events.config_yaml`、`trajectory_events.utils`。
  包内单测（packages/*/tests）可以为了覆盖细节导入内部模块，不在此约束范围内。
"""

from __future__ import annotations

import ast
import fnmatch
from dataclasses import dataclass
from pathlib import Path

_PACKAGE = "trajectory_events"
_ALLOWED_SUBMODULES = {"adapters", "config_yaml", "utils"}


@dataclass(frozen=True, slots=True)
class _BadImport:
    file: str
    lineno: int
    module: str


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _iter_py_files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*.py") if "__pycache__" not in p.parts)


def _is_disallowed(module: str) -> bool:
    if not module.startswith(_PACKAGE + "."):
        return False
    seg = module.split(".")[1]
    return seg not in _ALLOWED_SUBMODULES


def _find_internal_imports(repo_root: Path, files: list[Path]) -> list[_BadImport]:
    bad: list[_BadImport] = []
    for p in files:
        rel = p.relative_to(repo_root).as_posix()
        try:
            tree = ast.parse(p.read_text(encoding="utf-8"), filename=rel)
        except SyntaxError as e:
            raise AssertionError(f"无法解析 Python 语法：{rel}:{e.lineno}:{e.offset}") from e

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if _is_disallowed(alias.name):
                        bad.append(_BadImport(rel, node.lineno, alias.name))
            elif isinstance(node, ast.ImportFrom):
                if node.level and node.level > 0:
                    continue
                if node.module and _is_disallowed(node.module):
                    bad.append(_BadImport(rel, node.lineno, node.module))
    return bad


def test_tools_scripts_do_not_look_like_pytest_tests() -> None:
    repo_root = _repo_root()
    tools_dir = repo_root / "tools"
    assert tools_dir.exists(), "预期仓库根目录存在 tools/ 目录。"

    disallowed_patterns = ["test_*.py", "*_test.py"]
    bad = [
        p.relative_to(repo_root).as_posix()
        for p in _iter_py_files(tools_dir)
        if any(fnmatch.fnmatch(p.name, pat) for pat in disallowed_patterns)
    ]

    assert not bad, "tools/ 下发现疑似单测命名的脚本（请重命名以避免歧义）：\n" + "\n".join(
        f"- {x}" for x in bad
    )


def test_tools_dir_is_not_a_python_package_or_pytest_plugin_root() -> None:
    repo_root = _repo_root()
    tools_dir = repo_root / "tools"

    bad = [
        p.relative_to(repo_root).as_posix()
        for p in _iter_py_files(tools_dir)
        if p.name in ("__init__.py", "conftest.py")
    ]

    assert bad == [], "tools/ 下不应出现包/pytest 插件入口文件（请移动到 src/ 或 tests/）：\n" + "\n".join(
        f"- {x}" for x in bad
    )


def test_tools_and_integration_tests_use_stable_entry_points_only() -> None:
    repo_root = _repo_root()
    files = _iter_py_files(repo_root / "tools") + _iter_py_files(repo_root / "tests")

    bad = _find_internal_imports(repo_root, files)

    assert bad == [], (
        "发现 tools/ 或 tests/ 导入了 trajectory_events 的内部模块路径；"
        f"请改为从包顶层或 {sorted(_ALLOWED_SUBMODULES)} 导入：\n"
        + "\n".join(f"- {b.file}:{b.lineno} import {b.module}" for b in bad)
    )
