"""
Files Engine - atomic persistence of generated artifacts.
"""

from blockforge.engines.files.atomic_writer import AtomicFileWriter, FILE_MODE

__all__ = [
    "AtomicFileWriter",
    "FILE_MODE",
]
