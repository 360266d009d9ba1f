import runpy

import pytest

import aicommit.cli as cli_module


def test_console_script_help(capsys):
    assert cli_module.main(["--help"]) == 0
    assert "usage: aic" in capsys.readouterr().out


def test_module_entrypoint_exit_code(monkeypatch, tmp_path):
    # Outside any repository the module exits with status 1
    monkeypatch.setattr("sys.argv", ["aic"])
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_module, "find_git_repo_root", lambda start=None: None)

    with pytest.raises(SystemExit) as ei:
        runpy.run_module("aicommit", run_name="__main__")
    assert ei.value.code == 1


def test_find_root_outside_repository_is_none(tmp_path):
    from aicommit.git import find_git_repo_root

    assert find_git_repo_root(tmp_path) is None
