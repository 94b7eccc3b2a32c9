import io

import pytest
from PIL import Image

from app.utils.config import ExtensionSettings, TextureFilter, TextureSettings
from domains.asset_processing.errors import ProcessingError, UnsupportedFormatError
from domains.asset_processing.processors import MeshProcessor, RawProcessor, TextureProcessor
from domains.asset_processing.transcode import MeshFormat
from domains.asset_processing.work import WorkItem
from tests.helpers import FakeTranscoder

ICC_PROFILE = b"fake-icc-profile-payload"


def _item(source, kind, destination=None):
    return WorkItem(source=source, destination=destination or source.with_name("out"), kind=kind)


def test_raw_execute_returns_exact_bytes(tmp_path, make_settings):
    source = tmp_path / "a.bin"
    source.write_bytes(b"\x00\x01binary\xff")

    assert RawProcessor().execute(_item(source, "raw"), make_settings()) == b"\x00\x01binary\xff"


def test_raw_execute_missing_source_raises(tmp_path, make_settings):
    with pytest.raises(ProcessingError):
        RawProcessor().execute(_item(tmp_path / "gone.png", "raw"), make_settings())


def test_mesh_execute_decodes_then_encodes(tmp_path, make_settings):
    source = tmp_path / "model.gltf"
    source.write_bytes(b"{}")
    transcoder = FakeTranscoder()
    processor = MeshProcessor(make_settings(), transcoder)

    assert processor.execute(_item(source, "mesh"), make_settings()) == b"GLB:{}"
    assert transcoder.decoded == [source]


def test_mesh_execute_unknown_container_fails(tmp_path, make_settings):
    source = tmp_path / "model.obj"
    source.write_bytes(b"v 0 0 0")
    processor = MeshProcessor(make_settings(), FakeTranscoder())

    with pytest.raises(UnsupportedFormatError):
        processor.execute(_item(source, "mesh"), make_settings())


def test_mesh_format_from_extension():
    assert MeshFormat.from_extension("GLB") is MeshFormat.GLB
    assert MeshFormat.from_extension("glxf") is MeshFormat.GLXF
    with pytest.raises(UnsupportedFormatError):
        MeshFormat.from_extension("fbx")


def _png(tmp_path, size):
    path = tmp_path / "tex.png"
    Image.new("RGBA", size, (255, 0, 0, 255)).save(path, format="PNG")
    return path


def test_texture_within_max_size_is_passed_through(tmp_path, make_settings):
    settings = make_settings(extensions=ExtensionSettings(texture=["png"]))
    source = _png(tmp_path, (8, 4))

    data = TextureProcessor().execute(_item(source, "texture"), settings)

    assert data == source.read_bytes()


def test_jpeg_is_not_reencoded_when_small_enough(tmp_path, make_settings):
    settings = make_settings(textures=TextureSettings(max_size=64))
    source = tmp_path / "photo.jpg"
    Image.effect_noise((32, 32), 64).convert("RGB").save(source, format="JPEG", quality=98)

    data = TextureProcessor().execute(_item(source, "texture"), settings)

    assert data == source.read_bytes()


def test_downscaled_jpeg_keeps_icc_profile(tmp_path, make_settings):
    settings = make_settings(textures=TextureSettings(max_size=16))
    source = tmp_path / "photo.jpg"
    Image.new("RGB", (64, 64), (10, 200, 30)).save(source, format="JPEG", icc_profile=ICC_PROFILE)

    data = TextureProcessor().execute(_item(source, "texture"), settings)

    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.size == (16, 16)
        assert img.info.get("icc_profile") == ICC_PROFILE


def test_texture_downscales_to_max_size(tmp_path, make_settings):
    settings = make_settings(textures=TextureSettings(filter=TextureFilter.NEAREST, max_size=16))
    source = _png(tmp_path, (64, 32))

    data = TextureProcessor().execute(_item(source, "texture"), settings)

    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (16, 8)


def test_texture_rejects_non_images(tmp_path, make_settings):
    source = tmp_path / "fake.png"
    source.write_bytes(b"not an image")

    with pytest.raises(ProcessingError):
        TextureProcessor().execute(_item(source, "texture"), make_settings())
