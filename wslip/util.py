# This file is part of wslip. See LICENSE file for license information.

import codecs
import logging
import os
import shutil
import time
from typing import NamedTuple, Optional, Tuple, Union

from wslip import settings

LOG = logging.getLogger(__name__)

# Longest boms first so utf-32 is never mistaken for utf-16
_BOMS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


class TextFile(NamedTuple):
    content: str
    encoding: str
    newline: str


def detect_encoding(blob: bytes) -> str:
    for bom, encoding in _BOMS:
        if blob.startswith(bom):
            return encoding
    return "utf-8"


def decode_binary(blob: Union[str, bytes]) -> Tuple[str, str]:
    """Decode ``blob`` using its byte order mark, utf-8 if there is none.

    :return: tuple of (text, encoding name usable by encode_text)
    """
    if isinstance(blob, str):
        return (blob, "utf-8")
    encoding = detect_encoding(blob)
    return (blob.decode(encoding), encoding)


def encode_text(text: Union[str, bytes], encoding="utf-8") -> bytes:
    if isinstance(text, bytes):
        return text
    return text.encode(encoding)


def detect_newline(text: str) -> str:
    if "\r\n" in text:
        return "\r\n"
    return "\n"


def load_binary_file(fname: Union[str, os.PathLike], *, quiet=False) -> bytes:
    LOG.debug("Reading from %s (quiet=%s)", fname, quiet)
    try:
        with open(fname, "rb") as ifh:
            contents = ifh.read()
    except FileNotFoundError:
        if not quiet:
            raise
        contents = b""
    LOG.debug("Read %s bytes from %s", len(contents), fname)
    return contents


def load_text_file(fname: Union[str, os.PathLike], *, quiet=False) -> TextFile:
    text, encoding = decode_binary(load_binary_file(fname, quiet=quiet))
    return TextFile(text, encoding, detect_newline(text))


def ensure_dir(path, mode=None):
    if not path or os.path.isdir(path):
        return
    os.makedirs(path)
    if mode is not None:
        os.chmod(path, mode)


def del_file(path):
    LOG.debug("Attempting to remove %s", path)
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def copy(src, dest):
    LOG.debug("Copying %s to %s", src, dest)
    shutil.copy2(src, dest)


def backup_path(path, now: Optional[float] = None) -> str:
    stamp = time.strftime(
        settings.BACKUP_TIME_FORMAT, time.localtime(now or time.time())
    )
    return "%s.%s.bak" % (os.fspath(path), stamp)


def backup_file(path, now: Optional[float] = None) -> Optional[str]:
    """Copy ``path`` next to itself with a timestamp suffix.

    Returns the backup location, or None when there was nothing to copy.
    """
    if not os.path.isfile(path):
        LOG.debug("Not backing up %s, it does not exist", path)
        return None
    dest = backup_path(path, now)
    copy(path, dest)
    return dest


def expand_path(path) -> str:
    return os.path.abspath(os.path.expanduser(os.fspath(path)))
