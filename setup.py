from setuptools import find_packages, setup

"""
# Usage instructions
#
# To install the package
#   'pip install .'
#
# To install with the test tooling
#   'pip install -e ".[test]"'
"""

setup(
    name="microbench",
    version="0.1.0",
    description="Discovery-driven micro-benchmarking with per-repetition process isolation",
    python_requires=">=3.11",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "numpy",
        "msgspec",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "microbench=microbench.cli:main",
        ],
    },
)
