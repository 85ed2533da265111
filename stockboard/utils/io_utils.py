# stockboard/utils/io_utils.py
from pathlib import Path
import tempfile
import os
from typing import Union

PathLike = Union[str, Path]


def _atomic_write(path: PathLike, data: Union[str, bytes], encoding: str = "utf-8") -> None:
    """
    Write `data` to `path` through a temp file and `os.replace`.

    Behavior:
      - str data is written in text mode with `encoding` and no newline
        translation; bytes data is written as is.
      - The temp file lives next to the target so the replace never crosses
        filesystems, and it is removed if anything fails.

    Raises:
        OSError (or subclass): left for the caller to handle/report.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".tmp", dir=str(p.parent))
    try:
        if isinstance(data, bytes):
            f = os.fdopen(fd, "wb")
        else:
            f = os.fdopen(fd, "w", encoding=encoding, newline="")
        with f:
            f.write(data)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError:
                # some filesystems refuse fsync; the replace below still applies
                pass

        os.replace(tmp_path, str(p))
    except OSError:
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            pass
        raise


def atomic_write_text(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    """
    Atomically write `text` to `path` (JSON stores, CSV and text reports).

    Args:
        path: destination path (str or Path); parent directories are created.
        text: content to write.
        encoding: text encoding (default "utf-8").

    Raises:
        OSError (or subclass): the target is left as it was.
    """
    _atomic_write(path, text, encoding=encoding)


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """
    Atomically write binary `data` to `path` (.xlsx workbooks).

    Args:
        path: destination path (str or Path); parent directories are created.
        data: raw bytes.

    Raises:
        OSError (or subclass): the target is left as it was.
    """
    _atomic_write(path, data)
