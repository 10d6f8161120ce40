"""
Configuration constants for DePict.

This module contains all configurable settings including:
- Accepted image extensions
- Distance radius presets used when searching the BK-tree
- Hashing and worker defaults
"""

# Image extensions accepted during discovery (matched case-insensitively)
ACCEPTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}

# Only scanned when pillow-heif is installed
HEIF_EXTENSIONS = {'.heic', '.heif'}

# Distance radius presets when searching similar images in the BK-tree
# Lower = stricter matching
RADIUS_EXACT = 0
RADIUS_LOW = 4
RADIUS_MEDIUM = 8
RADIUS_HIGH = 16
RADIUS_VERY_HIGH = 32

RADIUS_PRESETS = {
    'exact': RADIUS_EXACT,
    'low': RADIUS_LOW,
    'medium': RADIUS_MEDIUM,
    'high': RADIUS_HIGH,
    'very-high': RADIUS_VERY_HIGH,
}

DEFAULT_RADIUS = RADIUS_MEDIUM

# Default number of parallel workers for fingerprinting
DEFAULT_WORKERS = 4

# Perceptual hash settings
# hash_size=16 gives a 256-bit hash (distances range 0-256)
DEFAULT_HASH_SIZE = 16
DEFAULT_HASH_ALGORITHM = 'phash'
HASH_ALGORITHMS = ('phash', 'dhash', 'average', 'whash')

# Database file written inside the scanned directory
DB_FILENAME = 'depict.db'
