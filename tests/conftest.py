from pathlib import Path

import pytest

from config import CONFIG


@pytest.fixture(autouse=True)
def restore_config():
    saved = CONFIG.copy()
    yield
    CONFIG.clear()
    CONFIG.update(saved)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write text to a CSV file under tmp_path and return its path as str."""

    def _write(name: str, text: str, encoding: str = "utf-8") -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode(encoding))
        return str(path)

    return _write
