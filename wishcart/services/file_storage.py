# wishcart/services/file_storage.py
from pathlib import Path
from typing import Optional

from wishcart.config import settings


def _ensure_dir(path: Path):
    path.mkdir(parents=True, exist_ok=True)


class LocalFileStorage:
    """
    Writes uploaded option files below a media directory. Writes are
    create-or-overwrite, so replaying the same upload is harmless.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self._base_dir = Path(base_dir) if base_dir is not None else None

    @property
    def base_dir(self) -> Path:
        return self._base_dir if self._base_dir is not None else Path(settings.MEDIA_DIR)

    def path_for(self, relative_path: str) -> Path:
        return self.base_dir / relative_path

    def write_file(self, relative_path: str, contents: bytes) -> Path:
        path = self.path_for(relative_path)
        _ensure_dir(path.parent)
        with open(path, "wb") as f:
            f.write(contents)
        return path
