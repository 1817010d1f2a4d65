"""
Setup script for recordrepo.

Allows development installation with `pip install -e .`
"""

import re
from pathlib import Path

from setuptools import setup, find_packages

VERSION = re.search(
    r'__version__ = "([^"]+)"',
    (Path(__file__).parent / "recordrepo" / "version.py").read_text(),
).group(1)

setup(
    name="recordrepo",
    version=VERSION,
    packages=find_packages(include=["recordrepo", "recordrepo.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pymongo>=4.2",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
