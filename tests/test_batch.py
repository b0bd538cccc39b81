"""
Tests for the batch driver and its report.
"""
import json
import math
import numpy as np
import pytest
import cv2

from image_enhancer import batch
from image_enhancer.batch import (
    EXIT_NO_INPUT, EXIT_OK, EXIT_PARTIAL_FAILURE,
    find_images, is_supported, main, process_batch, process_image_file
)
from image_enhancer.io import read_image
from image_enhancer.pipeline import DEFAULT_RECIPE, enhance_image
from image_enhancer.report import CHARTS_NAME, REPORT_NAME, create_batch_visualizations, generate_report


class TestFindImages:
    """Test directory enumeration."""

    @pytest.mark.parametrize("name,expected", [
        ("a.jpg", True), ("a.JPEG", True), ("a.Png", True), ("a.bmp", True),
        ("a.tiff", False), ("a.txt", False), ("png", False),
    ])
    def test_supported_extensions(self, name, expected):
        """Only jpg/jpeg/png/bmp, case-insensitive."""
        assert is_supported(name) is expected

    def test_non_recursive_and_filtered(self, image_dir):
        """Subdirectories and unsupported files are skipped."""
        names = [p.name for p in find_images(image_dir)]
        assert names == ["a.png", "b.JPG", "c.bmp"]

    def test_missing_directory(self, tmp_path):
        """A missing input directory cannot be opened."""
        with pytest.raises(FileNotFoundError):
            find_images(tmp_path / "nope")


class TestProcessBatch:
    """Test per-file processing and the batch loop."""

    def test_process_single_file(self, image_dir, tmp_path):
        """Output keeps the source name and holds the enhanced pixels."""
        out_dir = tmp_path / "out"
        result = process_image_file(image_dir / "a.png", out_dir)

        assert result.success
        assert result.output_path == str(out_dir / "a.png")
        assert result.image_shape == (12, 16, 3)
        assert 'psnr' in result.metrics

        written = read_image(out_dir / "a.png")
        expected = enhance_image(read_image(image_dir / "a.png"))
        np.testing.assert_allclose(written, expected, atol=0.5 / 255 + 1e-6)

    def test_decode_failure_reported(self, tmp_path):
        """Unreadable files become failed results instead of exceptions."""
        bad = tmp_path / "broken.png"
        bad.write_bytes(b"garbage")
        result = process_image_file(bad, tmp_path / "out")
        assert not result.success
        assert result.error
        assert not (tmp_path / "out" / "broken.png").exists()

    def test_encode_failure_reported(self, image_dir, tmp_path):
        """A blocked destination becomes a failed result."""
        out_dir = tmp_path / "out"
        (out_dir / "a.png").mkdir(parents=True)
        result = process_image_file(image_dir / "a.png", out_dir)
        assert not result.success
        assert result.image_shape == (12, 16, 3)

    def test_enhancement_error_reported(self, image_dir, tmp_path, monkeypatch):
        """An unexpected error inside the pipeline fails only that file."""
        real_enhance = batch.enhance_image

        def _flaky(img, recipe):
            if img.shape == (12, 16, 3) and not hasattr(_flaky, "raised"):
                _flaky.raised = True
                raise MemoryError("image too large")
            return real_enhance(img, recipe)

        monkeypatch.setattr(batch, "enhance_image", _flaky)
        results = process_batch(image_dir, tmp_path / "out", workers=1)

        assert [r.success for r in results] == [False, True, True]
        assert results[0].error == "MemoryError: image too large"
        assert not (tmp_path / "out" / "a.png").exists()

    def test_batch_continues_after_failure(self, image_dir, tmp_path):
        """One bad file does not stop the others."""
        (image_dir / "z_broken.bmp").write_bytes(b"nope")
        out_dir = tmp_path / "out"

        results = process_batch(image_dir, out_dir, workers=1)

        assert [r.image_name for r in results] == ["a.png", "b.JPG", "c.bmp", "z_broken.bmp"]
        assert [r.success for r in results] == [True, True, True, False]
        assert sorted(p.name for p in out_dir.iterdir()) == ["a.png", "b.JPG", "c.bmp"]

    def test_parallel_matches_sequential(self, image_dir, tmp_path):
        """Worker processes produce the same files as in-process runs."""
        seq = process_batch(image_dir, tmp_path / "seq", workers=1)
        par = process_batch(image_dir, tmp_path / "par", workers=2)

        assert [r.image_name for r in seq] == [r.image_name for r in par]
        for r in seq:
            assert (tmp_path / "seq" / r.image_name).read_bytes() == \
                (tmp_path / "par" / r.image_name).read_bytes()

    def test_empty_directory(self, tmp_path):
        """Nothing to do still creates the output directory."""
        (tmp_path / "in").mkdir()
        assert process_batch(tmp_path / "in", tmp_path / "out") == []
        assert (tmp_path / "out").is_dir()


class TestReport:
    """Test report generation."""

    def test_unchanged_image_report_is_strict_json(self, tmp_path):
        """An all-black image has infinite PSNR, stored as null."""
        src = tmp_path / "in"
        src.mkdir()
        cv2.imwrite(str(src / "black.png"), np.zeros((4, 4, 3), dtype=np.uint8))
        out_dir = tmp_path / "out"
        results = process_batch(src, out_dir, workers=1)
        assert math.isinf(results[0].metrics["psnr"])

        generate_report(results, out_dir, 0.1, DEFAULT_RECIPE)

        def _reject(token):
            raise ValueError(f"non-standard JSON constant {token}")

        saved = json.loads((out_dir / REPORT_NAME).read_text(), parse_constant=_reject)
        assert saved["detailed_results"][0]["metrics"]["psnr"] is None
        assert saved["detailed_results"][0]["metrics"]["mae"] == 0.0
        assert saved["quantitative_analysis"]["psnr_avg"] == 0.0

    def test_report_written(self, image_dir, tmp_path, capsys):
        """JSON report holds counts, recipe and per-file results."""
        (image_dir / "z_broken.png").write_bytes(b"nope")
        out_dir = tmp_path / "out"
        results = process_batch(image_dir, out_dir, workers=1)

        report = generate_report(results, out_dir, 1.5, DEFAULT_RECIPE)

        saved = json.loads((out_dir / REPORT_NAME).read_text())
        assert saved['run_info']['total_images'] == 4
        assert saved['run_info']['succeeded'] == 3
        assert saved['run_info']['failed'] == 1
        assert saved['recipe'] == DEFAULT_RECIPE.to_config()
        assert 'z_broken.png' in saved['failures']
        assert len(saved['detailed_results']) == 4
        assert report['run_info'] == saved['run_info']
        assert "IMAGE ENHANCEMENT REPORT" in capsys.readouterr().out

    def test_charts_written(self, image_dir, tmp_path):
        """The chart sheet is rendered to a PNG."""
        results = process_batch(image_dir, tmp_path / "out", workers=1)
        chart = create_batch_visualizations(results, tmp_path / "out")
        assert chart.name == CHARTS_NAME
        assert chart.read_bytes()[:4] == b"\x89PNG"


class TestMain:
    """Test the command-line entry point."""

    def test_success_exit_code(self, image_dir, tmp_path):
        """All files enhanced: exit 0 and a report."""
        out_dir = tmp_path / "out"
        code = main(["--input", str(image_dir), "--output", str(out_dir), "--workers", "1"])
        assert code == EXIT_OK
        assert (out_dir / REPORT_NAME).is_file()
        assert (out_dir / "a.png").is_file()

    def test_missing_input_exit_code(self, tmp_path):
        """Unopenable input directory: exit 1."""
        code = main(["--input", str(tmp_path / "nope"), "--output", str(tmp_path / "out")])
        assert code == EXIT_NO_INPUT

    def test_partial_failure_exit_code(self, image_dir, tmp_path):
        """Any failed file: exit 2, without a report when disabled."""
        (image_dir / "broken.jpg").write_bytes(b"nope")
        out_dir = tmp_path / "out"
        code = main(["--input", str(image_dir), "--output", str(out_dir),
                     "--workers", "1", "--no-report"])
        assert code == EXIT_PARTIAL_FAILURE
        assert not (out_dir / REPORT_NAME).exists()

    def test_charts_flag(self, image_dir, tmp_path):
        """--charts renders the chart sheet."""
        out_dir = tmp_path / "out"
        main(["--input", str(image_dir), "--output", str(out_dir), "--workers", "1", "--charts"])
        assert (out_dir / CHARTS_NAME).is_file()

    def test_default_config(self):
        """Defaults read images/ and write output/ at JPEG quality 95."""
        assert batch.DEFAULT_CONFIG['input_dir'] == 'images'
        assert batch.DEFAULT_CONFIG['output_dir'] == 'output'
        assert batch.DEFAULT_CONFIG['jpeg_quality'] == 95
