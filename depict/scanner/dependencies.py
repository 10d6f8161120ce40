"""
Third-party imports shared by the scanner package.

Pillow and imagehash are required. pillow-heif adds HEIC/HEIF decoding and
tqdm adds progress bars; the scanner works without either.
"""

from __future__ import annotations

import logging
from typing import Optional, Any

_logger = logging.getLogger(__name__)

try:
    from PIL import Image
    import imagehash
except ImportError:
    raise ImportError(
        "DePict needs Pillow and imagehash.\n"
        "Install with: pip install Pillow imagehash"
    )

# HEIC/HEIF files are only discovered when an opener is registered
HAS_HEIF_SUPPORT = False
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
    HAS_HEIF_SUPPORT = True
except ImportError:
    _logger.debug("pillow-heif not installed, skipping .heic/.heif files")

HAS_TQDM = False
_tqdm_class: Optional[Any] = None
try:
    from tqdm import tqdm as _tqdm_class
    HAS_TQDM = True
except ImportError:
    pass


__all__ = [
    'Image',
    'imagehash',
    'HAS_HEIF_SUPPORT',
    'HAS_TQDM',
    '_tqdm_class',
    '_logger',
]
