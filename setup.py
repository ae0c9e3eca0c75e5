"""Setup script for rgh package."""

from setuptools import setup, find_packages

setup(
    name="rgh",
    version="0.3.0",
    description="Dispatch GitHub Actions workflows and find the run they started",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0",
        "pyyaml>=5.4",
        "httpx>=0.24",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rgh=rgh.cli.main:cli",
        ],
    },
)
