# setup.py
from setuptools import setup, find_packages

setup(
    name="schematic_decoder",
    version="0.1.0",
    packages=find_packages(include=['schematic_decoder', 'schematic_decoder.*']),
    install_requires=[
        "construct>=2.10",
        "numpy>=1.21",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.8",
    description="Reader for gzip compressed .schematic volume files",
    keywords="schematic, nbt, voxel",
    entry_points={
        "console_scripts": [
            "inspect-schematic=schematic_decoder.main:main",
        ],
    },
)
