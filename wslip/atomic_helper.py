# This file is part of wslip. See LICENSE file for license information.

import logging
import os
import stat
import tempfile

from wslip import util

_DEF_PERMS = 0o644
LOG = logging.getLogger(__name__)


def write_file(
    filename,
    content,
    mode=_DEF_PERMS,
    encoding="utf-8",
    preserve_mode=True,
    backup=False,
):
    """Replace filename with content via a temporary sibling file.

    When backup is set the current file is copied aside before the
    temporary file takes its place. Returns the backup path, if any.
    """
    filename = os.fspath(filename)
    if preserve_mode:
        try:
            mode = stat.S_IMODE(os.stat(filename).st_mode)
        except OSError:
            pass

    content = util.encode_text(content, encoding)
    dirname = os.path.dirname(filename)
    util.ensure_dir(dirname)
    tf = None
    try:
        tf = tempfile.NamedTemporaryFile(
            dir=dirname or ".", delete=False, mode="wb", prefix=".wslip-"
        )
        LOG.debug(
            "Atomically writing to file %s (via temporary file %s) - [%o]"
            " %d bytes",
            filename,
            tf.name,
            mode,
            len(content),
        )
        tf.write(content)
        tf.flush()
        os.fsync(tf.fileno())
        tf.close()
        os.chmod(tf.name, mode)
        backup_name = util.backup_file(filename) if backup else None
        os.replace(tf.name, filename)
    except Exception as e:
        if tf is not None:
            tf.close()
            util.del_file(tf.name)
        raise e
    return backup_name
