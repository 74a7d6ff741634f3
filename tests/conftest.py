"""pytest 运行期配置。

本仓库代码位于 `packages/trajectory_events/src/`，测试运行应基于已安装到当前环境的包
（例如 `pip install -e .[test]` 后再执行 `python -m pytest`）。

注意：请不要在测试侧把 `packages/*/src` 注入 sys.path。
一旦出现“源码目录 + 已安装包”双来源，`import trajectory_events` 的解析结果会有歧义，
进而引入难以排查的不一致问题。
"""

from __future__ import annotations
