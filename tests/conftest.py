import pytest

from app.utils.config import ExtensionSettings, Settings


@pytest.fixture
def trees(tmp_path):
    source = tmp_path / "assets-dev"
    output = tmp_path / "assets"
    source.mkdir()
    return source, output


@pytest.fixture
def make_settings(trees):
    source, output = trees

    def _make(**overrides) -> Settings:
        values = {
            "source_dir": source,
            "output_dir": output,
            "worker_threads": 0,
            "extensions": ExtensionSettings(raw=["png", "txt"], texture=[], mesh=["glb", "gltf", "glxf"]),
        }
        values.update(overrides)
        return Settings(**values)

    return _make
