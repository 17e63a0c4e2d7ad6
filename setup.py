#!/usr/bin/env python3
# setup.py：安装 group-mirror 命令行工具
#
# 安装方式：
#   pip install -e .
#   pip install -e .[test]   # 含测试依赖
#
# 启动方式：
#   group-mirror mirror https://github.com/my-org

from setuptools import setup, find_packages

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Mirror GitLab groups and GitHub organizations to local disk"

setup(
    name="group-mirror",
    version="1.0.0",
    description="Clone or update every repository of GitLab groups or GitHub organizations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=["main"],
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "colorama>=0.4.6",
        "keyring>=25.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "group-mirror=group_mirror.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Version Control :: Git",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
