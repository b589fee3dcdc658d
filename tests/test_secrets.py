"""Tests for config/secrets.py.

Tests for env:, env-b64:, b64: and file: secret references.
"""

import base64

import pytest

from toolsconf.config.secrets import (
    SecretFormat,
    from_base64,
    parse_reference,
    read_dir,
    read_file,
    resolve_secret,
)
from toolsconf.core.errors import SecretUnresolvedError


class TestParseReference:
    """Tests for parse_reference."""

    def test_env(self, monkeypatch):
        """Test env: reads the variable."""
        monkeypatch.setenv("TOOLSCONF_TEST_SECRET", "hunter2")
        assert parse_reference("env:TOOLSCONF_TEST_SECRET") == b"hunter2"

    def test_env_unset_raises(self, monkeypatch):
        """Test env: with an unset variable fails."""
        monkeypatch.delenv("TOOLSCONF_UNSET_VAR", raising=False)
        with pytest.raises(SecretUnresolvedError) as exc:
            parse_reference("env:TOOLSCONF_UNSET_VAR")
        assert "TOOLSCONF_UNSET_VAR" in str(exc.value)

    def test_env_empty_raises(self, monkeypatch):
        """Test env: with an empty variable fails like an unset one."""
        monkeypatch.setenv("TOOLSCONF_EMPTY_VAR", "")
        with pytest.raises(SecretUnresolvedError):
            parse_reference("env:TOOLSCONF_EMPTY_VAR")

    def test_env_b64(self, monkeypatch):
        """Test env-b64: decodes the variable and drops the trailing newline."""
        monkeypatch.setenv("TOOLSCONF_TEST_SECRET", "dGVzdC1wYXNzd29yZAo=")
        assert parse_reference("env-b64:TOOLSCONF_TEST_SECRET") == b"test-password"

    def test_b64(self):
        assert parse_reference("b64:dGVzdA==") == b"test"

    def test_b64_trailing_newline_dropped(self):
        assert parse_reference("b64:dGVzdC1wYXNzd29yZAo=") == b"test-password"

    def test_b64_malformed_raises(self):
        """Test malformed base64 surfaces the decode error."""
        with pytest.raises(SecretUnresolvedError) as exc:
            parse_reference("b64:not base64!")
        assert exc.value.__cause__ is not None

    def test_file(self, tmp_path):
        """Test file: reads the file minus one trailing newline."""
        secret = tmp_path / "pass.txt"
        secret.write_text("password-file\n")
        assert parse_reference(f"file:{secret}") == b"password-file"

    def test_file_relative_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "pass.txt").write_text("relative")
        assert parse_reference("file:pass.txt") == b"relative"

    def test_file_missing_raises(self, tmp_path):
        with pytest.raises(SecretUnresolvedError) as exc:
            parse_reference(f"file:{tmp_path / 'missing.txt'}")
        assert isinstance(exc.value.__cause__, OSError)

    def test_no_colon_is_not_reference(self):
        assert parse_reference("plainvalue") is None

    def test_unknown_scheme_is_not_reference(self):
        assert parse_reference("vault:secret/path") is None

    def test_scheme_outside_mask_is_not_reference(self, monkeypatch):
        """Test a scheme the caller did not allow falls through."""
        monkeypatch.setenv("TOOLSCONF_TEST_SECRET", "hunter2")
        formats = SecretFormat.B64 | SecretFormat.FILE
        assert parse_reference("env:TOOLSCONF_TEST_SECRET", formats) is None

    def test_payload_may_contain_colons(self, tmp_path):
        """Test only the first colon separates scheme and payload."""
        secret = tmp_path / "a:b.txt"
        secret.write_text("colon")
        assert parse_reference(f"file:{secret}") == b"colon"


class TestResolveSecret:
    """Tests for resolve_secret."""

    def test_literal_returned_unchanged(self):
        assert resolve_secret("plainvalue") == b"plainvalue"

    def test_literal_with_colon(self):
        """Test a colon alone does not make a reference."""
        assert resolve_secret("user:pass") == b"user:pass"

    def test_reference_resolved(self):
        assert resolve_secret("b64:dGVzdA==") == b"test"

    def test_unset_env_raises(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR", raising=False)
        with pytest.raises(SecretUnresolvedError):
            resolve_secret("env:UNSET_VAR")


class TestFileHelpers:
    """Tests for from_base64, read_file and read_dir."""

    def test_from_base64_keeps_inner_newlines(self):
        assert from_base64("YQpiCgo=") == b"a\nb\n"

    def test_from_base64_ignores_line_breaks(self):
        """Test base64 wrapped at 76 columns decodes like the unwrapped text."""
        data = b"x" * 200
        wrapped = base64.encodebytes(data).decode()
        assert "\n" in wrapped.rstrip("\n")
        assert from_base64(wrapped) == data
        assert from_base64(wrapped.replace("\n", "\r\n")) == data

    def test_env_b64_wrapped_certificate(self, monkeypatch, root_ca):
        monkeypatch.setenv("TOOLSCONF_TEST_CERT", base64.encodebytes(root_ca.cert_pem).decode())
        assert parse_reference("env-b64:TOOLSCONF_TEST_CERT") == root_ca.cert_pem.rstrip(b"\n")

    def test_read_file_without_trim(self, tmp_path):
        path = tmp_path / "cert.pem"
        path.write_bytes(b"data\n")
        assert read_file(path, trim_newline=False) == b"data\n"

    def test_read_dir_sorted_regular_files(self, tmp_path):
        """Test read_dir reads every file in name order and skips subdirectories."""
        (tmp_path / "b.pem").write_text("second\n")
        (tmp_path / "a.pem").write_text("first\n")
        (tmp_path / "nested").mkdir()
        assert read_dir(tmp_path) == [b"first", b"second"]

    def test_read_dir_missing_raises(self, tmp_path):
        with pytest.raises(SecretUnresolvedError):
            read_dir(tmp_path / "missing")
