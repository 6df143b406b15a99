"""Setup script for the Stack Exchange topic graph project."""

from setuptools import find_packages, setup

setup(
    name="stackgraph",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "polars>=0.20.0",
        "kedro>=0.18.0",
        "networkx>=3.0",
        "tqdm>=4.60.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.0.265",
            "PyYAML>=6.0",
        ],
    },
    python_requires=">=3.11",
    description="Strongly connected components, egonets and communities of Stack Exchange topic graphs",
)
