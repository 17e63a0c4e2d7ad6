#!/usr/bin/env python3
# 镜像脚本入口：克隆/更新 GitLab 分组或 GitHub 组织下的所有仓库
#
# 用法：
#   python main.py mirror https://github.com/my-org
#   python main.py mirror group1,group2 -p gitlab --parallel 8
#   python main.py config

import sys
from pathlib import Path

SRC = Path(__file__).resolve().parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from group_mirror.cli import main  # noqa: E402


if __name__ == '__main__':
    sys.exit(main())
