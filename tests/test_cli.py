"""Tests for the command-line entry point."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from PIL import Image

from seam_carving.__main__ import (main, load_image, default_output_path,
                                   resolve_target_size)


@pytest.fixture
def rgb_png(tmp_path):
    rng = np.random.default_rng(42)
    path = tmp_path / 'photo.png'
    Image.fromarray(rng.integers(0, 256, (20, 30, 3), dtype=np.uint8)).save(path)
    return path


@pytest.fixture
def gray_png(tmp_path):
    rng = np.random.default_rng(7)
    path = tmp_path / 'scan.png'
    Image.fromarray(rng.integers(0, 256, (16, 12), dtype=np.uint8)).save(path)
    return path


class TestResolveTargetSize:
    def test_ratios_truncate(self):
        assert resolve_target_size(101, 55, 0.9, 0.5) == (90, 27)

    def test_absolute_overrides_ratio(self):
        assert resolve_target_size(100, 50, 0.9, 0.9, target_width=64) == (64, 45)
        assert resolve_target_size(100, 50, 0.9, 0.9, target_height=10) == (90, 10)


class TestLoadImage:
    def test_rgb(self, rgb_png):
        image, channels = load_image(rgb_png)
        assert channels == 3
        assert tuple(image.shape) == (20, 30, 3)

    def test_gray_stays_single_channel(self, gray_png):
        image, channels = load_image(gray_png)
        assert channels == 1
        assert tuple(image.shape) == (16, 12, 1)

    def test_rgba_becomes_rgb(self, tmp_path):
        path = tmp_path / 'alpha.png'
        Image.new('RGBA', (5, 4), (10, 20, 30, 128)).save(path)
        image, channels = load_image(path)
        assert channels == 3
        assert image[0, 0].tolist() == [10, 20, 30]


class TestMain:
    def test_default_output(self, rgb_png):
        assert main([str(rgb_png)]) == 0
        out = default_output_path(rgb_png)
        assert out.name == 'photo_seamed.png'
        with Image.open(out) as img:
            assert img.size == (27, 18)
            assert img.mode == 'RGB'

    def test_explicit_size_and_output(self, rgb_png, tmp_path):
        out = tmp_path / 'nested' / 'small.png'
        code = main([str(rgb_png), '--width', '21', '--height', '20',
                     '-o', str(out), '--energy-mode', 'recomputed', '--kernel', '5'])
        assert code == 0
        with Image.open(out) as img:
            assert img.size == (21, 20)

    def test_ratio_flags(self, gray_png, tmp_path):
        out = tmp_path / 'ratio.png'
        assert main([str(gray_png), '-w', '0.5', '-l', '1.0', '-o', str(out)]) == 0
        with Image.open(out) as img:
            assert img.size == (6, 16)
            assert img.mode == 'L'

    def test_edges_and_plot(self, rgb_png, tmp_path):
        edges = tmp_path / 'edges.png'
        plot = tmp_path / 'figure.png'
        code = main([str(rgb_png), '-w', '0.8', '-l', '0.8',
                     '--edges', str(edges), '--plot', str(plot)])
        assert code == 0
        with Image.open(edges) as img:
            assert img.size == (30, 20)
            assert img.mode == 'L'
        assert plot.exists()

    def test_enlargement_fails(self, rgb_png, tmp_path):
        out = tmp_path / 'big.png'
        assert main([str(rgb_png), '--width', '40', '-o', str(out)]) == 1
        assert not out.exists()

    def test_rejected_target_writes_no_edges(self, rgb_png, tmp_path):
        edges = tmp_path / 'edges.png'
        assert main([str(rgb_png), '--width', '40', '--edges', str(edges)]) == 1
        assert not edges.exists()

    @pytest.mark.parametrize('every', ['0', '-3'])
    def test_progress_every_must_be_positive(self, rgb_png, tmp_path, every):
        out = tmp_path / 'out.png'
        with pytest.raises(SystemExit) as excinfo:
            main([str(rgb_png), '--progress-every', every, '-o', str(out)])
        assert excinfo.value.code != 0
        assert not out.exists()

    def test_missing_file_fails(self, tmp_path):
        assert main([str(tmp_path / 'nope.png')]) == 1

    def test_progress_is_logged(self, rgb_png, caplog):
        with caplog.at_level('INFO', logger='seam_carving'):
            main([str(rgb_png), '--progress-every', '2', '-w', '0.9', '-l', '1.0'])
        assert 'Removed 2/3 seams' in caplog.text
        assert 'Removed 3/3 seams' in caplog.text
