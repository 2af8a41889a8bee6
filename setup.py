#!/usr/bin/env python3
"""
Setup script for daemonparams package.
"""

from setuptools import setup, find_packages

setup(
    name="daemonparams",
    version="0.42",
    description="Layered, lazy configuration resolution for a build daemon client",
    author="daemonparams Team",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "typer>=0.9",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "daemonparams=daemonparams.cli.main:main",
        ],
    },
)
