"""Top-level package for ebookforge.

ebookforge turns a declarative spec (chapters, their filter chains, and an
output stage) into finished book artifacts. The main orchestration entry
point is `EbookForge`.
"""

from .pipeline import EbookForge, FilterRegistry

__all__ = ["EbookForge", "FilterRegistry", "__version__"]

__version__ = "0.1.0"
