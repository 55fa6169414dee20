# This file is part of wslip. See LICENSE file for license information.

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from wslip import net, settings
from wslip.exceptions import InvalidAddressError, ParseError
from wslip.parsers import chop_comment

LOG = logging.getLogger(__name__)


@dataclass
class Verbatim:
    """A blank or comment line, written back exactly as read."""

    text: str

    def render(self) -> str:
        return self.text


@dataclass
class Binding:
    address: str
    hostnames: List[str] = field(default_factory=list)
    comment: str = ""
    # Original text, dropped once the address changes
    raw: Optional[str] = None

    def has(self, hostname) -> bool:
        wanted = hostname.casefold()
        return any(h.casefold() == wanted for h in self.hostnames)

    def discard(self, hostname) -> bool:
        wanted = hostname.casefold()
        kept = [h for h in self.hostnames if h.casefold() != wanted]
        if len(kept) == len(self.hostnames):
            return False
        if self.raw is not None and kept:
            (head, tail) = chop_comment(self.raw, "#")
            for h in self.hostnames:
                if h.casefold() == wanted:
                    head = re.sub(
                        r"\s+%s(?=\s|$)" % re.escape(h), "", head, count=1
                    )
            self.raw = head + tail
        else:
            self.raw = None
        self.hostnames = kept
        return True

    def render(self) -> str:
        if self.raw is not None:
            return self.raw
        line = "%s  %s" % (self.address, " ".join(self.hostnames))
        if self.comment:
            line = "%s  %s" % (line, self.comment)
        return line


Record = Union[Verbatim, Binding]


def _same_address(a, b) -> bool:
    try:
        return net.ip_address(a) == net.ip_address(b)
    except ValueError:
        return a == b


def _check_hostname(hostname):
    if not hostname or any(c.isspace() or c == "#" for c in hostname):
        raise ValueError("Invalid hostname '%s'" % hostname)


# See: man hosts
# or https://linux.die.net/man/5/hosts
class HostsConf:
    """Line oriented hosts file document.

    Lines that are not touched through upsert/remove are written back
    byte for byte.
    """

    def __init__(self, text="", path=None):
        self.path = path
        self.records: List[Record] = []
        self._trailing_newline = not text or text.endswith("\n")
        self._parse(text)

    def _parse(self, contents):
        for (lineno, line) in enumerate(contents.splitlines(), 1):
            if not line.strip():
                self.records.append(Verbatim(line))
                continue
            (head, tail) = chop_comment(line, "#")
            if not head.strip():
                self.records.append(Verbatim(line))
                continue
            pieces = head.split()
            if len(pieces) < 2 or not net.is_ip_address(pieces[0]):
                raise ParseError(
                    "Malformed hosts entry '%s'" % line.strip(),
                    path=self.path,
                    line_number=lineno,
                )
            self.records.append(
                Binding(pieces[0], pieces[1:], tail.strip(), raw=line)
            )

    def bindings(self) -> List[Tuple[int, Binding]]:
        return [
            (idx, rec)
            for (idx, rec) in enumerate(self.records)
            if isinstance(rec, Binding)
        ]

    def find(self, hostname) -> List[Binding]:
        return [rec for (_idx, rec) in self.bindings() if rec.has(hostname)]

    def lookup(self, hostname) -> Optional[str]:
        found = self.find(hostname)
        if found:
            return found[0].address
        return None

    def upsert(self, address, hostname) -> bool:
        """Make hostname resolve to address with exactly one binding."""
        if not net.is_ip_address(address):
            raise InvalidAddressError("Invalid address '%s'" % address)
        _check_hostname(hostname)
        found = self.find(hostname)
        if not found:
            self._append_managed(Binding(address, [hostname]))
            LOG.debug("Added hosts binding %s -> %s", hostname, address)
            return True

        current = [b for b in found if _same_address(b.address, address)]
        if current:
            keep = current[0]
        else:
            keep = found[0]
            if len(keep.hostnames) == 1:
                LOG.debug(
                    "Moving hosts binding %s from %s to %s",
                    hostname,
                    keep.address,
                    address,
                )
                keep.address = address
                keep.raw = None
            else:
                keep.discard(hostname)
                keep = Binding(address, [hostname])
                self._append_managed(keep)
                LOG.debug(
                    "Split %s off a shared hosts line, now bound to %s",
                    hostname,
                    address,
                )
        changed = not current
        for stale in found:
            if stale is not keep:
                stale.discard(hostname)
                changed = True
        self._prune()
        return changed

    def remove(self, hostname) -> bool:
        changed = False
        for binding in self.find(hostname):
            changed = binding.discard(hostname) or changed
        if changed:
            LOG.debug("Removed %s from hosts bindings", hostname)
            self._prune()
        return changed

    def _region(self) -> Tuple[Optional[int], Optional[int]]:
        begin = end = None
        for (idx, rec) in enumerate(self.records):
            if not isinstance(rec, Verbatim):
                continue
            text = rec.text.strip()
            if text == settings.HOSTS_REGION_BEGIN and begin is None:
                begin = idx
            elif text == settings.HOSTS_REGION_END and begin is not None:
                end = idx
                break
        return (begin, end)

    def _append_managed(self, binding):
        (begin, end) = self._region()
        if begin is None:
            self.records.append(Verbatim(settings.HOSTS_REGION_BEGIN))
            self.records.append(binding)
            self.records.append(Verbatim(settings.HOSTS_REGION_END))
        elif end is None:
            self.records.append(binding)
            self.records.append(Verbatim(settings.HOSTS_REGION_END))
        else:
            self.records.insert(end, binding)

    def _prune(self):
        self.records = [
            rec
            for rec in self.records
            if not (isinstance(rec, Binding) and not rec.hostnames)
        ]
        (begin, end) = self._region()
        if begin is not None and end == begin + 1:
            del self.records[begin : end + 1]

    def dumps(self, newline="\n") -> str:
        lines = [rec.render() for rec in self.records]
        if not lines:
            return ""
        contents = newline.join(lines)
        if self._trailing_newline:
            contents += newline
        return contents

    def __str__(self):
        return self.dumps()
