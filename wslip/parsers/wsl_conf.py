# This file is part of wslip. See LICENSE file for license information.

import logging
import re

# This library is used to parse/write the ini style config file shared
# with the scripts running inside each instance. Values are kept as
# literal strings: no list splitting, no unquoting, no interpolation.
import configobj

from wslip.exceptions import ParseError

LOG = logging.getLogger(__name__)

_SECTION_RE = re.compile(r"^\s*(\[+)\s*([^\]]*?)\s*(\]+)\s*(#.*)?$")
_KEY_RE = re.compile(r"""^\s*("[^"]*"|'[^']*'|[^=#\s\[][^=]*?)\s*=""")
_AT_LINE_RE = re.compile(r"\s+at line \d+\.?$")


def _merge_repeated_sections(numbered):
    """Fold the body of a repeated top level [section] into the first one.

    Works on (line number, text) pairs so errors still point at the line
    the user wrote. Keys land ahead of the nested sections of the first
    occurrence.
    """
    preamble = []
    blocks = {}
    current = preamble
    name = None
    for (lineno, line) in numbered:
        match = _SECTION_RE.match(line)
        if match and len(match.group(1)) == 1:
            name = match.group(2)
            if name in blocks:
                LOG.debug(
                    "Merging repeated section [%s] on line %s", name, lineno
                )
            else:
                blocks[name] = ([(lineno, line)], [])
            current = blocks[name][0]
            continue
        if match and name is not None:
            current = blocks[name][1]
        current.append((lineno, line))
    merged = list(preamble)
    for (keys, nested) in blocks.values():
        merged.extend(keys + nested)
    return merged


def _drop_shadowed_keys(numbered):
    """Drop earlier duplicates of a key so the last assignment wins.

    configobj refuses duplicate keys, the config file is hand edited.
    """
    section = ()
    last_seen = {}
    shadowed = set()
    for (idx, (_lineno, line)) in enumerate(numbered):
        sect_match = _SECTION_RE.match(line)
        if sect_match:
            depth = len(sect_match.group(1))
            section = section[: depth - 1] + (sect_match.group(2),)
            continue
        key_match = _KEY_RE.match(line)
        if key_match:
            ident = (section, key_match.group(1).strip("'\""))
            if ident in last_seen:
                LOG.debug(
                    "Dropping shadowed value for '%s' on line %s",
                    ident[1],
                    numbered[last_seen[ident]][0],
                )
                shadowed.add(last_seen[ident])
            last_seen[ident] = idx
    return [
        pair for (idx, pair) in enumerate(numbered) if idx not in shadowed
    ]


class WslConf(configobj.ConfigObj):
    def __init__(self, contents=None):
        configobj.ConfigObj.__init__(
            self,
            contents if contents is not None else [],
            interpolation=False,
            list_values=False,
            write_empty_values=True,
            indent_type="",
        )

    @classmethod
    def parse(cls, text, path=None):
        numbered = list(enumerate(text.splitlines(), 1))
        numbered = _drop_shadowed_keys(_merge_repeated_sections(numbered))
        try:
            return cls([line for (_lineno, line) in numbered])
        except configobj.ConfigObjError as e:
            errors = getattr(e, "errors", None) or [e]
            line_number = getattr(errors[0], "line_number", None)
            if line_number is not None and 0 < line_number <= len(numbered):
                line_number = numbered[line_number - 1][0]
            raise ParseError(
                "Invalid config file: %s"
                % _AT_LINE_RE.sub("", str(errors[0])),
                path,
                line_number,
            ) from e

    def _handle_comment(self, comment):
        if not comment:
            return ""
        if not comment.startswith("#"):
            comment = "# " + comment
        return "  " + comment

    def _write_line(self, indent_string, entry, this_entry, comment):
        val = self._decode_element(self._quote(this_entry))
        key = self._decode_element(self._quote(entry, multiline=False))
        line = "%s%s = %s" % (indent_string, key, val)
        return line.rstrip() + self._decode_element(comment)

    def lines(self):
        return self.write()

    def __str__(self):
        return "\n".join(self.lines())
