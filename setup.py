"""
Setup script for rk-sift.
"""

from setuptools import setup, find_packages

setup(
    name="rk-sift",
    version="0.1.0",
    description="Rabin-Karp substring search with Bloom filter pre-checks",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    package_data={"rk_sift": ["py.typed"]},
    python_requires=">=3.8",
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
)
