"""pytest 配置。

说明：
    - 本包采用 src-layout（`packages/trajectory_events/src/trajectory_events`）。
    - 测试运行环境应当“已安装本包”（例如 `pip install -e .[test]`）。
    - 不使用 `sys.path` 注入 `src` 路径，避免出现“本地能跑但安装/打包后失败”的环境差异。
"""
