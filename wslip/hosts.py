# This file is part of wslip. See LICENSE file for license information.

import copy
import logging
import os
from typing import Optional

from wslip import atomic_helper, settings, util
from wslip.parsers.hosts import HostsConf

LOG = logging.getLogger(__name__)


class HostsStore:
    """The system hosts file, read the first time it is needed."""

    def __init__(self, path=settings.HOSTS_FILE):
        self.path = os.fspath(path)
        self._doc: Optional[HostsConf] = None
        self._encoding = "utf-8"
        self._newline = "\n"
        self._modified = False

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def doc(self) -> HostsConf:
        if self._doc is None:
            self.load()
        return self._doc

    def load(self):
        text_file = util.load_text_file(self.path, quiet=True)
        self._doc = HostsConf(text_file.content, path=self.path)
        self._encoding = text_file.encoding
        self._newline = text_file.newline
        self._modified = False

    def dumps(self) -> str:
        return self.doc.dumps(self._newline)

    def save(self, backup=False) -> bool:
        if not self._modified:
            LOG.debug("No changes to %s, not writing it", self.path)
            return False
        backup_name = atomic_helper.write_file(
            self.path, self.dumps(), encoding=self._encoding, backup=backup
        )
        if backup_name:
            LOG.info("Saved previous %s as %s", self.path, backup_name)
        self._modified = False
        return True

    def snapshot(self):
        if self._doc is None:
            return None
        return (copy.deepcopy(self._doc), self._modified)

    def restore(self, snapshot):
        if snapshot is None:
            self._doc = None
            self._modified = False
            return
        (doc, modified) = snapshot
        self._doc = doc
        self._modified = modified

    def lookup(self, hostname) -> Optional[str]:
        return self.doc.lookup(hostname)

    def upsert(self, address, hostname) -> bool:
        changed = self.doc.upsert(address, hostname)
        self._modified |= changed
        return changed

    def remove(self, hostname) -> bool:
        changed = self.doc.remove(hostname)
        self._modified |= changed
        return changed
