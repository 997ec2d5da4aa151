"""Rails CI job matrix generator.

Turns a declarative matrix configuration plus metadata from a Rails checkout
into the flattened job lists consumed by the GitHub Actions workflow.
"""

from .matrix import MatrixOutput, assemble_matrix, generate_matrix
from .sections import MatrixEntry, SectionKind

__version__ = "0.1.0"

__all__ = [
    "MatrixEntry",
    "MatrixOutput",
    "SectionKind",
    "assemble_matrix",
    "generate_matrix",
]
