"""
Input data module for PasillaFlow

Reads the gene count matrix and the sample design table and checks that they
describe the same samples.
"""

from .loader import (
    SampleDesign,
    align_samples,
    build_design,
    load_counts,
    load_design,
    load_inputs,
    validate_counts,
)

__all__ = [
    "SampleDesign",
    "load_counts",
    "load_design",
    "load_inputs",
    "align_samples",
    "build_design",
    "validate_counts",
]
