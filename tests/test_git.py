import subprocess
from pathlib import Path

import pytest

from sksync.git import GitClient, GitCommandError, GitInstallSource


def _git(path: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", "-C", str(path), *args], capture_output=True, check=True
    )
    return completed.stdout.decode().strip()


def _make_repo(path: Path, content: str) -> str:
    (path / "skills" / "review").mkdir(parents=True)
    _git(path, "init")
    _git(path, "config", "user.email", "test@example.com")
    _git(path, "config", "user.name", "Test User")
    _git(path, "config", "commit.gpgsign", "false")
    (path / "skills" / "review" / "SKILL.md").write_text(content)
    _git(path, "add", ".")
    _git(path, "commit", "-m", "add review")
    return _git(path, "rev-parse", "HEAD")


def test_wanted_ref_uses_reference_when_given():
    source = GitInstallSource(url="repo", path="skills/x", reference="v1.2")
    assert source.wanted_ref() == "v1.2"
    assert source.path == Path("skills/x")


def test_wanted_ref_defaults_to_head():
    source = GitInstallSource(url="repo", path="skills/x")
    assert source.wanted_ref() == "HEAD"


def test_error_message_names_repo_and_reason():
    error = GitCommandError("some-repo", "boom")
    assert str(error) == "git command failed for some-repo: boom"
    assert error == GitCommandError("some-repo", "boom")


def test_clone_of_missing_repository_fails(tmp_path):
    missing = str(tmp_path / "does-not-exist")
    source = GitInstallSource(url=missing, path="skills")
    with pytest.raises(GitCommandError) as info:
        GitClient().clone_checkout(source, tmp_path / "clone")
    assert info.value.repo == missing


def test_resolve_head_outside_repository_fails(tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()
    with pytest.raises(GitCommandError) as info:
        GitClient().resolve_head(plain, "label")
    assert info.value.repo == "label"


def test_clone_checkout_default_ref_matches_remote_head(tmp_path):
    remote = tmp_path / "remote"
    remote.mkdir()
    rev = _make_repo(remote, "v1")
    clone = tmp_path / "clone"

    client = GitClient()
    client.clone_checkout(GitInstallSource(url=str(remote), path="skills/review"), clone)

    assert client.resolve_head(clone, str(remote)) == rev
    assert (clone / "skills" / "review" / "SKILL.md").read_text() == "v1"


def test_clone_checkout_exact_commit(tmp_path):
    remote = tmp_path / "remote"
    remote.mkdir()
    first = _make_repo(remote, "v1")
    (remote / "skills" / "review" / "SKILL.md").write_text("v2")
    _git(remote, "add", ".")
    _git(remote, "commit", "-m", "update")
    clone = tmp_path / "clone"

    client = GitClient()
    client.clone_checkout(
        GitInstallSource(url=str(remote), path="skills/review", reference=first), clone
    )

    assert client.resolve_head(clone, str(remote)) == first
    assert (clone / "skills" / "review" / "SKILL.md").read_text() == "v1"


def test_clone_checkout_unknown_reference_fails(tmp_path):
    remote = tmp_path / "remote"
    remote.mkdir()
    _make_repo(remote, "v1")
    source = GitInstallSource(
        url=str(remote), path="skills/review", reference="no-such-ref"
    )
    with pytest.raises(GitCommandError) as info:
        GitClient().clone_checkout(source, tmp_path / "clone")
    assert info.value.repo == str(remote)