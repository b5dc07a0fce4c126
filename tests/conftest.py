import pytest

from shared.config import settings


@pytest.fixture(autouse=True)
def scratch_root(tmp_path, monkeypatch):
    """Point pipeline scratch directories at a per-test location."""
    root = tmp_path / "scratch"
    monkeypatch.setattr(settings, "TMP_DIR", root)
    return root
