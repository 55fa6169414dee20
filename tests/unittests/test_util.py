# This file is part of wslip. See LICENSE file for license information.

import codecs
import os
import time

import pytest

from wslip import util


class TestDecodeBinary:
    @pytest.mark.parametrize(
        "blob,text,encoding",
        [
            pytest.param(b"a = b\n", "a = b\n", "utf-8", id="plain"),
            pytest.param(
                codecs.BOM_UTF8 + b"a = b\n", "a = b\n", "utf-8-sig", id="bom"
            ),
            pytest.param(
                "a = b\n".encode("utf-16"), "a = b\n", "utf-16", id="utf16"
            ),
            pytest.param(
                codecs.BOM_UTF16_BE + "a = b\n".encode("utf-16-be"),
                "a = b\n",
                "utf-16",
                id="utf16-be",
            ),
            pytest.param("already text", "already text", "utf-8", id="str"),
        ],
    )
    def test_decode_binary(self, blob, text, encoding):
        assert (text, encoding) == util.decode_binary(blob)

    def test_encoding_round_trips(self):
        """Whatever encoding was detected can write the text back."""
        for encoding in ("utf-8", "utf-8-sig", "utf-16"):
            blob = "[network]\n".encode(encoding)
            text, found = util.decode_binary(blob)
            assert blob == util.encode_text(text, found)


class TestLoadTextFile:
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            util.load_text_file(tmp_path / "missing")

    def test_missing_file_quiet(self, tmp_path):
        found = util.load_text_file(tmp_path / "missing", quiet=True)
        assert ("", "utf-8", "\n") == found

    def test_crlf_is_detected(self, tmp_path):
        path = tmp_path / "hosts"
        path.write_bytes(b"127.0.0.1 localhost\r\n")
        assert "\r\n" == util.load_text_file(path).newline


class TestBackup:
    def test_backup_path_has_timestamp_suffix(self):
        now = time.mktime((2024, 3, 5, 14, 7, 9, 0, 0, -1))
        assert "/x/cfg.20240305-140709.bak" == util.backup_path("/x/cfg", now)

    def test_backup_file_copies(self, tmp_path):
        path = tmp_path / "cfg"
        path.write_text("[network]\n")
        dest = util.backup_file(path)
        assert dest.startswith(str(path) + ".")
        assert dest.endswith(".bak")
        with open(dest) as fp:
            assert "[network]\n" == fp.read()

    def test_backup_missing_file(self, tmp_path):
        assert util.backup_file(tmp_path / "cfg") is None
        assert [] == os.listdir(tmp_path)


class TestDelFile:
    def test_del_file_missing_is_fine(self, tmp_path):
        util.del_file(tmp_path / "nothing")

    def test_del_file(self, tmp_path):
        path = tmp_path / "something"
        path.write_text("")
        util.del_file(path)
        assert not path.exists()
