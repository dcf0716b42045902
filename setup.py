#!/usr/bin/env python3

import pathlib

from setuptools import find_packages, setup

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text()

# Version
__version__ = "0.1.0"

setup(
    name="pasillaflow",
    version=__version__,
    author="PasillaFlow Development Team",
    author_email="pasillaflow@example.com",
    description="Differential expression analysis of the Pasilla RNA-seq knock-down study",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        # Core scientific computing
        "numpy>=1.20.0",
        "pandas>=1.5.0",
        "scipy>=1.7.0",
        # Visualization
        "matplotlib>=3.6.0",
        "seaborn>=0.12.0",
        "adjustText>=0.8",
        # Statistics
        "pydeseq2>=0.5.0",
        "scikit-learn>=1.0.0",
        # Configuration and utilities
        "pyyaml>=6.0",
        "click>=8.0.0",
        "colorlog>=6.6.0",
        # Parallel processing
        "joblib>=1.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "dev": [
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pasillaflow=pasillaflow.cli:main",
            "pf=pasillaflow.cli:main",
        ],
    },
    zip_safe=False,
    keywords=[
        "RNA-seq",
        "differential-expression",
        "DESeq2",
        "pasilla",
        "Drosophila",
        "bioinformatics",
        "transcriptomics",
    ],
)
