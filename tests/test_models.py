"""
Unit tests for data models.
"""

import imagehash
import pytest

from conftest import IntItem
from depict.models import DistanceMetric, ImageInfo

ZERO = '0000000000000000'
FOUR_BITS = '000000000000000f'
EIGHT_BITS = '00000000000000ff'


def _info(hex_hash: str, name: str) -> ImageInfo:
    return ImageInfo(hash=imagehash.hex_to_hash(hex_hash), name=name)


class TestImageInfo:
    """Test ImageInfo data class."""

    def test_distance_is_hamming(self):
        a = _info(ZERO, 'a.jpg')
        b = _info(FOUR_BITS, 'b.jpg')
        c = _info(EIGHT_BITS, 'c.jpg')
        assert a.distance_from(b) == 4
        assert a.distance_from(c) == 8
        assert b.distance_from(c) == 4

    def test_distance_to_self_is_zero(self):
        a = _info(EIGHT_BITS, 'a.jpg')
        assert a.distance_from(a) == 0

    def test_distance_is_int(self):
        a = _info(ZERO, 'a.jpg')
        b = _info(FOUR_BITS, 'b.jpg')
        assert type(a.distance_from(b)) is int

    def test_str(self):
        assert str(_info(FOUR_BITS, 'b.jpg')) == f"b.jpg  {FOUR_BITS}"

    def test_to_dict(self):
        assert _info(EIGHT_BITS, 'c.jpg').to_dict() == {'h': EIGHT_BITS, 'n': 'c.jpg'}

    def test_from_dict(self):
        info = ImageInfo.from_dict({'h': FOUR_BITS, 'n': 'b.jpg'})
        assert info.name == 'b.jpg'
        assert info.hash == imagehash.hex_to_hash(FOUR_BITS)

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            ImageInfo.from_dict({'h': ZERO})

    def test_from_dict_bad_hex(self):
        with pytest.raises(ValueError):
            ImageInfo.from_dict({'h': 'zzzzzzzzzzzzzzzz', 'n': 'x.jpg'})

    @pytest.mark.parametrize("data", [
        {'h': ZERO, 'n': None},
        {'h': ZERO, 'n': 5},
        {'h': 0, 'n': 'x.jpg'},
    ])
    def test_from_dict_non_string_field(self, data):
        with pytest.raises(TypeError):
            ImageInfo.from_dict(data)


class TestDistanceMetric:
    """Test the DistanceMetric protocol."""

    def test_image_info_conforms(self):
        assert isinstance(_info(ZERO, 'a.jpg'), DistanceMetric)

    def test_custom_item_conforms(self):
        assert isinstance(IntItem(1, 'one'), DistanceMetric)

    def test_plain_object_does_not_conform(self):
        assert not isinstance(object(), DistanceMetric)
