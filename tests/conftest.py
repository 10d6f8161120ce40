"""
Pytest configuration and shared fixtures for test suite.
"""

import random
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest
from PIL import Image


@dataclass
class IntItem:
    """Minimal distance-capable item: integers under absolute difference."""
    value: int
    name: str

    def distance_from(self, other: 'IntItem') -> int:
        return abs(self.value - other.value)

    def to_dict(self) -> dict:
        return {'v': self.value, 'n': self.name}

    @classmethod
    def from_dict(cls, data: dict) -> 'IntItem':
        return cls(value=int(data['v']), name=data['n'])


def make_noise_image(seed: int, size=(64, 64)) -> Image.Image:
    """Deterministic grayscale noise; different seeds give unrelated hashes."""
    rng = random.Random(seed)
    data = bytes(rng.randrange(256) for _ in range(size[0] * size[1]))
    return Image.frombytes('L', size, data)


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path_factory, monkeypatch):
    """Keep the user's real ~/.depict/config.json and DEPICT_* variables out of tests."""
    from depict.user_config import get_user_config

    for var in ('DEPICT_RADIUS', 'DEPICT_WORKERS', 'DEPICT_HASH_SIZE',
                'DEPICT_HASH_ALGORITHM', 'DEPICT_DB_FILENAME'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('DEPICT_CONFIG_DIR', str(tmp_path_factory.mktemp('config')))
    get_user_config().reload()
    yield
    get_user_config().reload()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sample_images(temp_dir):
    """
    Create a set of sample images for testing.

    Returns:
        dict with paths to:
        - noise_a.png, noise_a_copy.png (identical pixels)
        - noise_b.png, noise_c.jpg (unrelated images)
        - corrupted.gif (image extension, not an image)
        - notes.txt (not an image extension)
    """
    images = {}

    img_a = make_noise_image(1)
    for key, filename in (('noise_a', 'noise_a.png'), ('noise_a_copy', 'noise_a_copy.png')):
        path = temp_dir / filename
        img_a.save(path, 'PNG')
        images[key] = str(path)

    path = temp_dir / 'noise_b.png'
    make_noise_image(2).save(path, 'PNG')
    images['noise_b'] = str(path)

    path = temp_dir / 'noise_c.jpg'
    make_noise_image(3).convert('RGB').save(path, 'JPEG', quality=95)
    images['noise_c'] = str(path)

    path = temp_dir / 'corrupted.gif'
    path.write_bytes(b'GIF89a this is not really an image')
    images['corrupted'] = str(path)

    path = temp_dir / 'notes.txt'
    path.write_text('not an image')
    images['notes'] = str(path)

    return images


@pytest.fixture
def abc_tree():
    """Tree with A(0), B(4), C(5) inserted in that order."""
    from depict.bktree import BKTree

    tree = BKTree()
    for item in (IntItem(0, 'A'), IntItem(4, 'B'), IntItem(5, 'C')):
        tree.add(item)
    return tree
