#!/usr/bin/env python3
from setuptools import find_packages, setup
import re

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    open("src/skrankone/_version.py").read(),
).group(1)

if __name__ == "__main__":
    setup(
        name="scikit-rankone",
        version=__version__,
        description=(
            "Rank-one updates of symmetric eigendecompositions, following the "
            "scikit-learn API"
        ),
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=[
            "numpy",
            "scipy",
            "scikit-learn>=1.6.0",
            "tqdm",
        ],
        extras_require={
            "tests": ["pytest"],
        },
    )
