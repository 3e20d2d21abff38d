import pytest

from trojango import cli


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.key == "server.key"
    assert args.cert == "server.crt"
    assert args.stdin_format == "disabled"
    assert args.server is False and args.client is False


def test_parser_single_dash_flags():
    args = cli.build_parser().parse_args(["-client", "-remote", "example.com:443", "-config", "a.json"])
    assert args.client is True
    assert args.remote == "example.com:443"
    assert args.config == "a.json"


def test_no_config_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        cli.main([])
    assert info.value.code == 1


def test_easy_client_without_remote_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        cli.main(["-client", "-password", "password"])
    assert info.value.code == 1


def test_unknown_run_type_in_config_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "c.yaml"
    path.write_text("run-type: nothing\n")
    with pytest.raises(SystemExit) as info:
        cli.main(["-config", str(path)])
    assert info.value.code == 1