"""
Integration tests for the conversion pipeline.
Runs real image files through decode, normalize and encode on disk.
"""

import struct
from pathlib import Path

import pytest
from PIL import Image

from xnb_pipeline.config import ConverterConfig
from xnb_pipeline.errors import InputError, OutputError, UnsupportedFeatureError, UsageError
from xnb_pipeline.pipeline import ConversionPipeline
from xnb_pipeline.processing.validator import XnbReader, XnbValidator


def make_png(path: Path, size=(2, 1), color=(255, 0, 0, 255), mode='RGBA') -> Path:
    image = Image.new(mode, size, color)
    image.save(path)
    return path


class TestSingleFileConversion:
    """Single file input."""

    def setup_method(self):
        self.pipeline = ConversionPipeline(ConverterConfig())

    def test_default_destination_beside_source(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")

        state = self.pipeline.run(source)

        destination = tmp_path / "sprite.xnb"
        assert destination.exists()
        assert state.files_converted == 1
        assert state.results[0].destination == destination
        assert state.results[0].bytes_written == destination.stat().st_size

    def test_output_into_existing_directory(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")
        out_dir = tmp_path / "content"
        out_dir.mkdir()

        self.pipeline.run(source, out_dir)

        assert (out_dir / "sprite.xnb").exists()

    def test_explicit_output_file(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")
        destination = tmp_path / "renamed.bin"

        self.pipeline.run(source, destination)

        assert destination.exists()
        assert not (tmp_path / "sprite.xnb").exists()

    def test_written_file_is_valid_and_round_trips(self, tmp_path):
        source = make_png(tmp_path / "sprite.png", size=(3, 2), color=(1, 2, 3, 255))

        self.pipeline.run(source)

        data = (tmp_path / "sprite.xnb").read_bytes()
        assert struct.unpack_from("<I", data, 6)[0] == len(data) == 187 + 3 * 2 * 4
        texture = XnbReader().read(data)
        assert (texture.width, texture.height) == (3, 2)
        assert texture.pixels == bytes([1, 2, 3, 255]) * 6
        assert XnbValidator().validate_bytes(data).is_valid

    def test_transparent_pixels_zeroed_on_disk(self, tmp_path):
        source = make_png(tmp_path / "ghost.png", size=(1, 1), color=(10, 20, 30, 0))

        self.pipeline.run(source)

        data = (tmp_path / "ghost.xnb").read_bytes()
        assert data[-4:] == b"\x00\x00\x00\x00"

    def test_gif_and_jpeg_inputs(self, tmp_path):
        gif = make_png(tmp_path / "anim.gif", mode='RGB', color=(0, 0, 255))
        jpeg = make_png(tmp_path / "photo.jpg", size=(8, 8), mode='RGB', color=(128, 128, 128))

        self.pipeline.run(gif)
        self.pipeline.run(jpeg)

        assert XnbReader().read_file(tmp_path / "anim.xnb").pixels[:4] == bytes([0, 0, 255, 255])
        assert XnbReader().read_file(tmp_path / "photo.xnb").width == 8

    def test_hidef_profile(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")

        ConversionPipeline(ConverterConfig(reach=False)).run(source)

        assert (tmp_path / "sprite.xnb").read_bytes()[5] == 0x01

    def test_same_input_same_output(self, tmp_path):
        source = make_png(tmp_path / "sprite.png", size=(4, 4), color=(5, 6, 7, 200))

        self.pipeline.run(source, tmp_path / "first.xnb")
        self.pipeline.run(source, tmp_path / "second.xnb")

        assert (tmp_path / "first.xnb").read_bytes() == (tmp_path / "second.xnb").read_bytes()


class TestFailures:
    """Failure handling for single conversions."""

    def test_compression_leaves_no_output(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")
        pipeline = ConversionPipeline(ConverterConfig(compressed=True))

        with pytest.raises(UnsupportedFeatureError):
            pipeline.run(source)

        assert not (tmp_path / "sprite.xnb").exists()

    def test_missing_input(self, tmp_path):
        with pytest.raises(InputError):
            ConversionPipeline().run(tmp_path / "missing.png")

        assert not (tmp_path / "missing.xnb").exists()

    def test_corrupt_input(self, tmp_path):
        source = tmp_path / "broken.png"
        source.write_bytes(b"definitely not a png")

        with pytest.raises(InputError):
            ConversionPipeline().run(source)

        assert not (tmp_path / "broken.xnb").exists()

    def test_unwritable_destination(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")

        with pytest.raises(OutputError):
            ConversionPipeline().run(source, tmp_path / "no_such_dir" / "sprite.xnb")

    def test_oversized_texture_leaves_no_output(self, tmp_path, monkeypatch):
        source = make_png(tmp_path / "sprite.png")
        monkeypatch.setattr(
            "xnb_pipeline.processing.encoder.uncompressed_file_size",
            lambda image, xnb_format=None: 0x1_0000_0000,
        )

        with pytest.raises(OutputError):
            ConversionPipeline().run(source)

        assert not (tmp_path / "sprite.xnb").exists()

    def test_wrong_format_hint(self, tmp_path):
        source = make_png(tmp_path / "sprite.png")

        with pytest.raises(InputError):
            ConversionPipeline(ConverterConfig(format_hint="gif")).run(source)


class TestDirectoryConversion:
    """Directory (batch) input."""

    def test_only_png_files_converted(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        make_png(in_dir / "a.png")
        make_png(in_dir / "b.gif", mode='RGB', color=(0, 0, 0))

        state = ConversionPipeline().run(in_dir, out_dir)

        assert sorted(p.name for p in out_dir.iterdir()) == ["a.xnb"]
        assert state.files_converted == 1

    def test_extension_match_ignores_case(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        make_png(in_dir / "UPPER.PNG")
        make_png(in_dir / "lower.png")

        ConversionPipeline().run(in_dir, out_dir)

        assert sorted(p.name for p in out_dir.iterdir()) == ["UPPER.xnb", "lower.xnb"]

    def test_subdirectories_not_walked(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        (in_dir / "nested").mkdir(parents=True)
        out_dir.mkdir()
        make_png(in_dir / "nested" / "deep.png")

        state = ConversionPipeline().run(in_dir, out_dir)

        assert state.files_converted == 0
        assert list(out_dir.iterdir()) == []

    def test_output_required(self, tmp_path):
        in_dir = tmp_path / "in"
        in_dir.mkdir()
        make_png(in_dir / "a.png")

        with pytest.raises(UsageError):
            ConversionPipeline().run(in_dir)

        assert sorted(p.name for p in in_dir.iterdir()) == ["a.png"]

    def test_output_must_be_existing_directory(self, tmp_path):
        in_dir = tmp_path / "in"
        in_dir.mkdir()
        make_png(in_dir / "a.png")

        with pytest.raises(UsageError):
            ConversionPipeline().run(in_dir, tmp_path / "missing")

        assert not (tmp_path / "missing").exists()

    def test_first_failure_aborts_batch(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        make_png(in_dir / "a.png")
        (in_dir / "b.png").write_bytes(b"corrupt")
        make_png(in_dir / "c.png")

        with pytest.raises(InputError) as excinfo:
            ConversionPipeline().run(in_dir, out_dir)

        assert excinfo.value.path == in_dir / "b.png"
        assert sorted(p.name for p in out_dir.iterdir()) == ["a.xnb"]

    def test_custom_input_extensions(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        make_png(in_dir / "a.png")
        make_png(in_dir / "b.gif", mode='RGB', color=(0, 0, 0))

        config = ConverterConfig(input_extensions=[".png", ".gif"])
        ConversionPipeline(config).run(in_dir, out_dir)

        assert sorted(p.name for p in out_dir.iterdir()) == ["a.xnb", "b.xnb"]
