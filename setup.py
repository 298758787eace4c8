# setup.py
from setuptools import setup

setup(
    name="VoxelPlacer",
    version="0.1.0",
    description="Block placement planner for voxel-world agents",
    python_requires=">=3.9",
    packages=["agent", "engine", "world"],
    install_requires=["panda3d"],
    extras_require={"test": ["pytest"]},
)
