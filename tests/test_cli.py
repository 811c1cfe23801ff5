import hashlib

import pytest

from looseobj import cli, data

HELLO = hashlib.sha1(b"blob 5\x00hello").hexdigest()


@pytest.fixture
def repo(tmp_path, capsys):
    assert cli.main(["-C", str(tmp_path), "init"]) == 0
    assert "Initialized empty looseobj repository" in capsys.readouterr().out
    return tmp_path


def _run(repo, *argv):
    return cli.main(["-C", str(repo), *argv])


def test_hash_object_without_write_only_prints(repo, tmp_path, capsys):
    source = tmp_path / "hello.txt"
    source.write_bytes(b"hello")
    assert _run(repo, "hash-object", str(source)) == 0
    assert capsys.readouterr().out.strip() == HELLO
    assert not (repo / ".looseobj" / "objects" / HELLO[:2]).exists()


def test_hash_object_write_then_cat_file(repo, tmp_path, capsys):
    source = tmp_path / "hello.txt"
    source.write_bytes(b"hello")
    assert _run(repo, "hash-object", "-w", "-t", "tag", str(source)) == 0
    digest = capsys.readouterr().out.strip()

    assert _run(repo, "cat-file", "-t", digest) == 0
    assert capsys.readouterr().out.strip() == "tag"
    assert _run(repo, "cat-file", "-s", digest) == 0
    assert capsys.readouterr().out.strip() == "5"
    assert _run(repo, "ls-objects") == 0
    assert capsys.readouterr().out.split() == [digest]


def test_cat_file_prints_raw_content(tmp_path, capsysbinary):
    repo = tmp_path
    with data.change_git_dir(str(repo)):
        data.init()
        digest = data.hash_object(b"\x00binary\xff")
    assert _run(repo, "cat-file", "-p", digest) == 0
    assert capsysbinary.readouterr().out == b"\x00binary\xff"


def test_errors_exit_with_status_one(repo, capsys):
    assert _run(repo, "cat-file", "-t", "0" * 40) == 1
    assert "not found" in capsys.readouterr().err
    assert _run(repo, "cat-file", "-t", "nothex") == 1
    assert "malformed object digest" in capsys.readouterr().err
    assert _run(repo, "init") == 1


def test_unknown_type_is_rejected_by_the_parser(repo, tmp_path):
    with pytest.raises(SystemExit):
        _run(repo, "hash-object", "-t", "delta", str(tmp_path / "missing"))
