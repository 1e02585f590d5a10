"""Shared pytest fixtures and configuration."""

from pathlib import Path

import pytest
from git import Actor, Repo

from ci_nodes.context import RecordingContext
from ci_nodes.models.message import RuleMsg

TEST_ACTOR = Actor("Test Bot", "bot@example.com")


def make_commit(
    repo: Repo, filename: str, content: str, message: str, date: str | None = None
) -> str:
    """Write a file, stage it and commit it. ``date`` uses git's "<epoch> <offset>" form."""
    path = Path(repo.working_tree_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([str(path)])
    dates = {"author_date": date, "commit_date": date} if date else {}
    commit = repo.index.commit(message, author=TEST_ACTOR, committer=TEST_ACTOR, **dates)
    return commit.hexsha


@pytest.fixture
def commit():
    """The make_commit helper as a fixture."""
    return make_commit


@pytest.fixture
def seed_repo(tmp_path: Path) -> Repo:
    """Non-bare repository with one commit on main."""
    repo = Repo.init(tmp_path / "seed", initial_branch="main")
    make_commit(repo, "README.md", "# project\n", "Initial commit")
    yield repo
    repo.close()


@pytest.fixture
def remote_url(tmp_path: Path, seed_repo: Repo) -> str:
    """Bare "remote" repository named project.git, cloned from the seed."""
    bare = Repo.clone_from(
        seed_repo.working_tree_dir, tmp_path / "remote" / "project.git", bare=True
    )
    url = bare.git_dir
    bare.close()
    return str(url)


@pytest.fixture
def upstream(tmp_path: Path, remote_url: str) -> Repo:
    """A second working copy used to publish new commits to the remote."""
    repo = Repo.clone_from(remote_url, tmp_path / "upstream")
    yield repo
    repo.close()


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Base directory nodes clone into."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def ctx() -> RecordingContext:
    """Context recording node outcomes."""
    return RecordingContext()


@pytest.fixture
def make_msg():
    """Factory for rule messages with the given metadata."""

    def _make(data: str = "", **metadata: str) -> RuleMsg:
        return RuleMsg(type="test", data=data, metadata=dict(metadata))

    return _make
