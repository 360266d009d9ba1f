import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    for name in (
        "AICOMMIT_PROVIDER",
        "AICOMMIT_LLM_ENDPOINT",
        "AICOMMIT_COMMIT_MODEL",
        "AICOMMIT_REVIEW_MODEL",
        "AICOMMIT_LLM_REQUEST_TIMEOUT",
        "XAI_API_KEY",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)

    # Keep the developer's git configuration out of the test repositories.
    global_cfg = tmp_path / "gitconfig"
    global_cfg.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_cfg))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "author@example.com")
    yield


# No test may reach the network. Tests that exercise the driver install
# their own fake ``httpx.post``.
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    import httpx

    def fake_post(url, *args, **kwargs):  # noqa: ARG001
        raise AssertionError(f"unexpected network call to {url}")

    monkeypatch.setattr(httpx, "post", fake_post)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self._text = text

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload

    @property
    def text(self):
        return self._text if self._text is not None else str(self._payload)


@pytest.fixture
def fake_api(monkeypatch):
    """Replace ``httpx.post`` with a recorder returning a canned payload.

    Call the fixture's ``respond`` with the JSON body (or ``None`` for a
    non-JSON body) before running code that posts.
    """
    import httpx

    class _Api:
        def __init__(self):
            self.calls = []
            self.response = FakeResponse({"choices": [{"message": {"content": "ok"}}]})

        def respond(self, payload, status_code=200):
            self.response = FakeResponse(payload, status_code=status_code)

        def post(self, url, headers=None, json=None, timeout=None, **_kw):
            self.calls.append(
                {"url": url, "headers": headers, "json": json, "timeout": timeout}
            )
            return self.response

    api = _Api()
    monkeypatch.setattr(httpx, "post", api.post)
    return api


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git():
    return _git


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A real repository with one commit containing ``file.txt``."""
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "-q")
    _git(path, "config", "commit.gpgsign", "false")
    (path / "file.txt").write_text("hello\n")
    (path / "other.txt").write_text("other\n")
    _git(path, "add", "file.txt", "other.txt")
    _git(path, "commit", "-q", "-m", "init")
    return path
