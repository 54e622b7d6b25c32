import base64
import logging
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Union

from .config import settings

logger = logging.getLogger(__name__)


class ImageStorage:
    """Stores uploaded product images under a single directory.

    Files are named ``<epoch milliseconds><original extension>``. The path
    returned by :meth:`save` is what goes into ``Product.image_url``; it is
    relative whenever ``upload_dir`` is.
    """

    def __init__(self, upload_dir: Union[str, Path]):
        self.upload_dir = Path(upload_dir)

    def _target(self, extension: str) -> Path:
        stamp = int(time.time() * 1000)
        path = self.upload_dir / f"{stamp}{extension}"
        n = 1
        while path.exists():
            path = self.upload_dir / f"{stamp}-{n}{extension}"
            n += 1
        return path

    def save(self, fileobj: BinaryIO, filename: str) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self._target(Path(filename).suffix)
        with open(path, "wb") as buffer:
            shutil.copyfileobj(fileobj, buffer)
        logger.debug("stored image %s as %s", filename, path)
        return path.as_posix()

    def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def read_base64(self, path: str) -> str:
        return base64.b64encode(self.read(path)).decode("ascii")

    def delete(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)
        logger.debug("deleted image %s", path)


IMAGES = ImageStorage(settings.UPLOAD_DIR)


def get_image_storage() -> ImageStorage:
    return IMAGES
