#!/usr/bin/env python3
"""
Setup script for keyconf package.
"""

from setuptools import setup, find_packages

setup(
    name="keyconf",
    version="0.1.0",
    description="Schema-validated configuration store with provenance and error aggregation",
    author="keyconf Team",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "rich>=13.0",
        "typer>=0.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "keyconf=keyconf.cli.main:main",
        ],
    },
)
