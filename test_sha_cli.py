import yaml

import pytest

from sha_cli import main


SHA1_EMPTY = "da39a3ee5e6b4b0d3255bfef95601890afd80709"
SHA1_ABC = "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_default_hashes_empty_string_with_sha1(tmp_path, capsys):
    assert main(["--output-dir", str(tmp_path)]) == 0

    assert capsys.readouterr().out.strip() == f"SHA-1: {SHA1_EMPTY}"
    assert (tmp_path / "output-SHA-1.txt").read_text() == SHA1_EMPTY


def test_text_mode(tmp_path, capsys):
    assert main(["sha-1", "-t", "abc", "--output-dir", str(tmp_path)]) == 0

    assert capsys.readouterr().out.strip() == f"SHA-1: {SHA1_ABC}"
    assert (tmp_path / "output-SHA-1.txt").read_text() == SHA1_ABC


def test_file_mode_with_yaml_output(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_bytes(b"abc")
    out_dir = tmp_path / "out"

    assert main(["SHA-2", "-f", str(source), "--output-dir", str(out_dir), "--format", "yaml"]) == 0

    printed = capsys.readouterr().out.strip()
    assert printed.startswith("SHA-2: ddaf35a193617aba")
    with open(out_dir / "output-SHA-2.yaml") as f:
        record = yaml.safe_load(f)
    assert record["family"] == "SHA-2"
    assert record["mode"] == "file"
    assert record["input"] == str(source)
    assert record["digest_hex"] == printed.split(": ")[1]


def test_no_output_flag(tmp_path, capsys):
    assert main(["SHA-1", "-t", "abc", "--no-output", "--output-dir", str(tmp_path)]) == 0

    assert SHA1_ABC in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []


def test_unsupported_family(tmp_path, capsys):
    assert main(["SHA-3", "-t", "abc", "--output-dir", str(tmp_path)]) == 1

    captured = capsys.readouterr()
    assert captured.err.startswith("error:")
    assert captured.out == ""


def test_unreadable_file(tmp_path, capsys):
    missing = tmp_path / "missing.bin"

    assert main(["SHA-1", "-f", str(missing), "--no-output"]) == 1
    assert "could not open the file" in capsys.readouterr().err


def test_malformed_resource_dir(tmp_path, capsys):
    assert main(["SHA-1", "-t", "abc", "--resource-dir", str(tmp_path), "--no-output"]) == 1
    assert "malformed descriptor" in capsys.readouterr().err


def test_text_and_file_are_exclusive(tmp_path):
    with pytest.raises(SystemExit):
        main(["SHA-1", "-t", "abc", "-f", str(tmp_path / "x")])
