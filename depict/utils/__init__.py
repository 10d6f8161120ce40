"""
Utilities package for DePict.

Provides:
- exporters: Export similarity results to files
"""

from __future__ import annotations

from . import exporters

from .exporters import EXPORT_FORMATS, export_results

__all__ = [
    # Submodules
    'exporters',
    # Exporters
    'EXPORT_FORMATS',
    'export_results',
]
