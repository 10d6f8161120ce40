"""
Tests for the command-line interface, reporting and exports.
"""

import argparse
import csv
import json
import logging
from pathlib import Path

import pytest

from conftest import make_noise_image
from depict.cli import main, parse_arguments, parse_radius, print_similarity_report
from depict.storage import load_tree
from depict.utils.exporters import export_results


def _run(directory, *extra) -> int:
    return main([str(directory), '--no-progress', '-w', '1', *extra])


class TestParseRadius:
    """Test parse_radius."""

    @pytest.mark.parametrize("value,expected", [
        ('exact', 0),
        ('low', 4),
        ('medium', 8),
        ('High', 16),
        ('very-high', 32),
        ('12', 12),
        (' 0 ', 0),
        (5, 5),
    ])
    def test_valid(self, value, expected):
        assert parse_radius(value) == expected

    @pytest.mark.parametrize("value", ['-1', 'huge', '', -2, '1.5'])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_radius(value)


class TestParseArguments:
    """Test parse_arguments."""

    def test_defaults(self):
        args = parse_arguments(['/photos'])
        assert args.directory == Path('/photos')
        assert args.radius == 8
        assert args.workers == 4
        assert args.hash_size == 16
        assert args.algorithm == 'phash'
        assert args.recursive is False
        assert args.db is None
        assert args.check == []
        assert args.export_format == 'txt'

    def test_radius_preset(self):
        assert parse_arguments(['/photos', '--radius', 'low']).radius == 4

    def test_repeated_check(self):
        args = parse_arguments(['/photos', '--check', 'a.jpg', '--check', 'b.jpg'])
        assert args.check == [Path('a.jpg'), Path('b.jpg')]

    def test_bad_radius_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(['/photos', '--radius', 'bogus'])
        assert exc_info.value.code == 2

    def test_zero_workers_exits(self):
        with pytest.raises(SystemExit):
            parse_arguments(['/photos', '--workers', '0'])

    def test_missing_directory_argument_exits(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_environment_radius(self, monkeypatch):
        monkeypatch.setenv('DEPICT_RADIUS', 'low')
        assert parse_arguments(['/photos']).radius == 4

    def test_environment_workers(self, monkeypatch):
        monkeypatch.setenv('DEPICT_WORKERS', '9')
        assert parse_arguments(['/photos']).workers == 9

    def test_invalid_configured_radius_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv('DEPICT_RADIUS', 'bogus')
        with caplog.at_level(logging.WARNING):
            assert parse_arguments(['/photos']).radius == 8
        assert "Ignoring configured radius" in caplog.text

    def test_invalid_configured_algorithm_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv('DEPICT_HASH_ALGORITHM', 'bogus')
        with caplog.at_level(logging.WARNING):
            assert parse_arguments(['/photos']).algorithm == 'phash'
        assert "Ignoring configured hash algorithm 'bogus'" in caplog.text

    def test_configured_algorithm(self, monkeypatch):
        monkeypatch.setenv('DEPICT_HASH_ALGORITHM', 'dhash')
        assert parse_arguments(['/photos']).algorithm == 'dhash'


class TestMain:
    """End-to-end CLI runs over a sample directory."""

    def test_indexes_and_reports(self, sample_images, temp_dir, capsys):
        assert _run(temp_dir, '--radius', 'exact') == 0

        db_path = temp_dir / 'depict.db'
        assert db_path.exists()
        tree = load_tree(db_path)
        assert len(tree) == 4

        out = capsys.readouterr().out
        assert "noise_a.png is similar to:" in out
        assert " - noise_a_copy.png" in out
        assert "noise_b.png is similar to:" not in out

    def test_rerun_is_idempotent(self, sample_images, temp_dir):
        assert _run(temp_dir) == 0
        first = json.loads((temp_dir / 'depict.db').read_text())
        assert _run(temp_dir) == 0
        second = json.loads((temp_dir / 'depict.db').read_text())
        assert first == second

    def test_custom_db_path(self, sample_images, temp_dir, tmp_path):
        db_path = tmp_path / 'index.json'
        assert _run(temp_dir, '--db', str(db_path)) == 0
        assert db_path.exists()
        assert not (temp_dir / 'depict.db').exists()

    def test_db_filename_from_environment(self, sample_images, temp_dir, monkeypatch):
        monkeypatch.setenv('DEPICT_DB_FILENAME', 'photos.idx')
        assert _run(temp_dir) == 0
        assert (temp_dir / 'photos.idx').exists()

    def test_hash_size_mismatch(self, sample_images, temp_dir):
        assert _run(temp_dir) == 0
        assert _run(temp_dir, '--hash-size', '8') == 1

    def test_algorithm_mismatch(self, sample_images, temp_dir):
        assert _run(temp_dir) == 0
        assert _run(temp_dir, '--algorithm', 'dhash') == 1

    def test_database_records_hash_settings(self, sample_images, temp_dir):
        assert _run(temp_dir, '--algorithm', 'dhash', '--hash-size', '8') == 0
        data = json.loads((temp_dir / 'depict.db').read_text())
        assert data['algorithm'] == 'dhash'
        assert data['hash_size'] == 8
        assert _run(temp_dir, '--algorithm', 'dhash', '--hash-size', '8') == 0

    def test_invalid_configured_algorithm_runs(self, sample_images, temp_dir, monkeypatch):
        monkeypatch.setenv('DEPICT_HASH_ALGORITHM', 'bogus')
        assert _run(temp_dir) == 0
        assert json.loads((temp_dir / 'depict.db').read_text())['algorithm'] == 'phash'

    def test_many_identical_images(self, temp_dir):
        image = make_noise_image(11)
        for i in range(520):
            image.save(temp_dir / f"copy{i:03d}.png")
        assert _run(temp_dir, '--radius', 'exact') == 0
        assert len(load_tree(temp_dir / 'depict.db')) == 520

    def test_missing_directory(self, temp_dir):
        assert _run(temp_dir / 'missing') == 1

    def test_corrupted_database_is_fatal(self, sample_images, temp_dir):
        db_path = temp_dir / 'depict.db'
        db_path.write_text('{"root": 42')
        assert _run(temp_dir) == 1
        assert db_path.read_text() == '{"root": 42'

    def test_empty_directory(self, temp_dir, capsys):
        assert _run(temp_dir) == 0
        assert load_tree(temp_dir / 'depict.db').is_empty
        assert "0 images with similar matches" in capsys.readouterr().out

    def test_check_file(self, sample_images, temp_dir, caplog):
        with caplog.at_level(logging.WARNING):
            assert _run(temp_dir, '--radius', '0', '--check', sample_images['noise_a']) == 0
        assert "noise_a.png is similar to noise_a_copy.png" in caplog.text

    def test_check_missing_file(self, sample_images, temp_dir):
        assert _run(temp_dir, '--check', str(temp_dir / 'missing.png')) == 1

    def test_export_json(self, sample_images, temp_dir, tmp_path):
        out_path = tmp_path / 'similar.json'
        assert _run(temp_dir, '-r', 'exact', '-e', str(out_path), '--export-format', 'json') == 0
        assert json.loads(out_path.read_text()) == {
            'radius': 0,
            'similars': {'noise_a.png': ['noise_a_copy.png']},
        }

    def test_export_csv(self, sample_images, temp_dir, tmp_path):
        out_path = tmp_path / 'similar.csv'
        assert _run(temp_dir, '-r', 'exact', '-e', str(out_path), '--export-format', 'csv') == 0
        with open(out_path, newline='', encoding='utf-8') as f:
            rows = list(csv.reader(f))
        assert rows == [['image', 'similar', 'radius'], ['noise_a.png', 'noise_a_copy.png', '0']]


class TestReporting:
    """Test print_similarity_report."""

    def test_report(self, capsys):
        print_similarity_report({'a.jpg': ['b.jpg', 'c.jpg'], 'd.png': ['e.png']}, 8)
        out = capsys.readouterr().out
        assert "SIMILAR IMAGES (radius=8)" in out
        assert "2 images with similar matches, 3 matches in total" in out
        assert "a.jpg is similar to:\n - b.jpg\n - c.jpg" in out
        assert "d.png is similar to:\n - e.png" in out


class TestExportResults:
    """Test export_results."""

    def test_txt(self, tmp_path):
        path = tmp_path / 'out.txt'
        export_results({'a.jpg': ['b.jpg']}, 4, path, 'txt')
        text = path.read_text(encoding='utf-8')
        assert text.startswith("SIMILAR IMAGES (radius=4)")
        assert "a.jpg is similar to:\n - b.jpg\n" in text

    def test_csv_quotes_commas(self, tmp_path):
        path = tmp_path / 'out.csv'
        export_results({'a,1.jpg': ['b.jpg']}, 4, path, 'csv')
        with open(path, newline='', encoding='utf-8') as f:
            rows = list(csv.reader(f))
        assert rows[1] == ['a,1.jpg', 'b.jpg', '4']

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError):
            export_results({}, 4, tmp_path / 'out.xml', 'xml')
