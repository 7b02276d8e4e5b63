"""Tests for the command line interface."""

import io
from pathlib import Path

import pytest

from cryptopan.cli import EXIT_BAD_ADDRESS, EXIT_BAD_CONFIG, EXIT_OK, main

REFERENCE_KEY = bytes([
    21, 34, 23, 141, 51, 164, 207, 128, 19, 10, 91, 22, 73, 144, 125, 16,
    216, 152, 143, 131, 121, 121, 101, 39, 98, 87, 76, 45, 42, 132, 34, 2,
])
KEY_HEX = REFERENCE_KEY.hex()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("CRYPTOPAN_KEY", raising=False)
    monkeypatch.delenv("CRYPTOPAN_BACKEND", raising=False)


class TestCLI:
    """End-to-end CLI runs."""

    def test_addresses_from_args(self, capsys):
        status = main(["--key", KEY_HEX, "128.11.68.132", "::1"])
        out = capsys.readouterr().out
        assert status == EXIT_OK
        assert out.splitlines() == ["135.242.180.132", "78ff:f001:9fc0:20df:8380:b1f1:704:ed"]

    def test_addresses_from_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("192.41.57.43\n\n  2001:db8::1  \n"))
        status = main(["--key", KEY_HEX])
        out = capsys.readouterr().out
        assert status == EXIT_OK
        assert out.splitlines() == ["252.222.221.184", "4401:2bc:603f:d91d:27f:ff8e:e6f1:dc1e"]

    def test_key_file(self, capsys, tmp_path: Path):
        path = tmp_path / "key.bin"
        path.write_bytes(REFERENCE_KEY)
        status = main(["--key-file", str(path), "128.11.68.132"])
        assert status == EXIT_OK
        assert capsys.readouterr().out.strip() == "135.242.180.132"

    def test_key_from_env(self, capsys, monkeypatch):
        monkeypatch.setenv("CRYPTOPAN_KEY", KEY_HEX)
        status = main(["128.11.68.132"])
        assert status == EXIT_OK
        assert capsys.readouterr().out.strip() == "135.242.180.132"

    def test_backend_option(self, capsys):
        status = main(["--key", KEY_HEX, "--backend", "cryptography", "128.11.68.132"])
        assert status == EXIT_OK
        assert capsys.readouterr().out.strip() == "135.242.180.132"

    def test_invalid_address_skipped(self, capsys):
        status = main(["--key", KEY_HEX, "bogus", "128.11.68.132"])
        captured = capsys.readouterr()
        assert status == EXIT_BAD_ADDRESS
        assert captured.out.strip() == "135.242.180.132"

    def test_strict_stops(self, capsys):
        status = main(["--key", KEY_HEX, "--strict", "bogus", "128.11.68.132"])
        captured = capsys.readouterr()
        assert status == EXIT_BAD_ADDRESS
        assert captured.out == ""
        assert "bogus" in captured.err


class TestCLIErrors:
    """Configuration failures."""

    def test_missing_key(self, capsys):
        status = main(["10.0.0.1"])
        assert status == EXIT_BAD_CONFIG
        assert "CRYPTOPAN_KEY" in capsys.readouterr().err

    def test_short_key(self, capsys):
        status = main(["--key", KEY_HEX[:30], "10.0.0.1"])
        assert status == EXIT_BAD_CONFIG
        assert "32 bytes" in capsys.readouterr().err

    def test_missing_key_file(self, capsys, tmp_path: Path):
        status = main(["--key-file", str(tmp_path / "nope"), "10.0.0.1"])
        assert status == EXIT_BAD_CONFIG

    def test_key_and_key_file_exclusive(self, tmp_path: Path):
        with pytest.raises(SystemExit):
            main(["--key", KEY_HEX, "--key-file", str(tmp_path / "k")])

    def test_unknown_backend(self):
        with pytest.raises(SystemExit):
            main(["--key", KEY_HEX, "--backend", "des", "10.0.0.1"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
