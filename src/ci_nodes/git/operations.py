"""Git operation executor.

Clone-or-pull, commit, create-tag, push and log-query against a resolved
work directory. Every function opens the repository for the duration of the
call only and translates GitPython errors into the node error taxonomy.
"""

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from git import Actor, GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.objects import Commit
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ci_nodes.constants import (
    DEFAULT_RETRY_MAX_WAIT,
    DEFAULT_RETRY_MIN_WAIT,
    DEFAULT_TAGGER_EMAIL,
    DEFAULT_TAGGER_NAME,
    LOG_DATE_LENGTH,
    LOG_END_OF_DAY,
    LOG_START_OF_DAY,
    LOG_TIME_FORMAT,
)
from ci_nodes.exceptions import (
    ConfigResolutionError,
    GitOperationError,
    NoChangesToCommit,
    RepositoryOpenError,
    TransportError,
)
from ci_nodes.git.auth import ResolvedAuth
from ci_nodes.git.transport import git_environment, short_ref
from ci_nodes.models.config import ProxyConfig
from ci_nodes.models.results import Committer, LogEntry
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)


class SyncOutcome(StrEnum):
    """What clone-or-pull actually did. Nodes report all three as success."""

    CLONED = "cloned"
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"


def redact_url(url: str) -> str:
    """Drop user info from a URL so it can be logged."""
    parts = urlsplit(url)
    if not parts.username and not parts.password:
        return url
    host = parts.hostname or ""
    if parts.port:
        host += f":{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


def _stderr(error: GitCommandError) -> str:
    return (error.stderr or str(error)).strip()


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Transport attempt {retry_state.attempt_number} failed, retrying",
        error=str(error),
    )


def _with_retry(attempts: int, func: Callable[..., Any], *args: Any) -> Any:
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=DEFAULT_RETRY_MIN_WAIT, max=DEFAULT_RETRY_MAX_WAIT),
        retry=retry_if_exception_type(TransportError),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(func, *args)


@contextmanager
def open_repository(work_dir: str) -> Iterator[Repo]:
    """
    Open the repository in ``work_dir`` and close it on exit.

    Raises:
        RepositoryOpenError: If the directory is missing or not a repository
    """
    try:
        repo = Repo(work_dir)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryOpenError(f"not a git repository: {work_dir}") from e
    try:
        yield repo
    finally:
        repo.close()


def clone_or_pull(
    repository: str,
    work_dir: str,
    reference: str = "",
    auth: ResolvedAuth | None = None,
    proxy: ProxyConfig | None = None,
    attempts: int = 1,
) -> SyncOutcome:
    """
    Clone ``repository`` into ``work_dir``, or force-pull it when the directory exists.

    Args:
        repository: Remote URL, used explicitly rather than a configured remote name
        work_dir: Local directory of the working copy
        reference: Branch or tag to restrict the clone/pull to, "" for remote HEAD
        auth: Resolved credentials, None for anonymous access
        proxy: Proxy settings
        attempts: Transport attempts before giving up

    Returns:
        What happened; an up-to-date working copy is not an error

    Raises:
        ConfigResolutionError: If the repository URL is empty
        RepositoryOpenError: If the directory exists but holds no repository
        TransportError: If clone or pull fails
    """
    if not repository:
        raise ConfigResolutionError("repository URL is empty")

    env = git_environment(auth, proxy)

    if not os.path.exists(work_dir):
        return _with_retry(attempts, _clone, repository, work_dir, reference, env)

    with open_repository(work_dir) as repo:
        return _with_retry(attempts, _pull, repo, repository, reference, env)


def _clone(repository: str, work_dir: str, reference: str, env: dict[str, str]) -> SyncOutcome:
    kwargs: dict[str, Any] = {}
    if reference:
        kwargs.update(branch=short_ref(reference), single_branch=True)

    logger.info(
        "Cloning repository",
        repository=redact_url(repository),
        work_dir=work_dir,
        reference=reference or None,
    )
    try:
        repo = Repo.clone_from(repository, work_dir, env=env, **kwargs)
    except GitCommandError as e:
        raise TransportError(f"clone of {redact_url(repository)} failed: {_stderr(e)}") from e
    repo.close()
    return SyncOutcome.CLONED


def _head_sha(repo: Repo) -> str | None:
    return repo.head.commit.hexsha if repo.head.is_valid() else None


def _pull(repo: Repo, repository: str, reference: str, env: dict[str, str]) -> SyncOutcome:
    args = ["--force", "--ff-only", repository]
    if reference:
        args.append(reference)

    before = _head_sha(repo)
    logger.info(
        "Pulling repository",
        repository=redact_url(repository),
        work_dir=repo.working_dir,
        reference=reference or None,
    )
    try:
        with repo.git.custom_environment(**env):
            repo.git.pull(*args)
    except GitCommandError as e:
        raise TransportError(f"pull of {redact_url(repository)} failed: {_stderr(e)}") from e

    if _head_sha(repo) == before:
        logger.info("Repository already up to date", work_dir=repo.working_dir)
        return SyncOutcome.UP_TO_DATE
    return SyncOutcome.UPDATED


def commit_changes(
    work_dir: str, pattern: str, message: str, author_name: str, author_email: str
) -> str:
    """
    Stage files matching ``pattern`` and commit them.

    Returns:
        Hash of the new commit

    Raises:
        RepositoryOpenError: If ``work_dir`` is not a repository
        NoChangesToCommit: If nothing matching ``pattern`` changed
        GitOperationError: If staging or committing fails
    """
    with open_repository(work_dir) as repo:
        if not repo.is_dirty(untracked_files=True):
            raise NoChangesToCommit(work_dir)

        actor = Actor(author_name, author_email)
        try:
            repo.git.add("--", pattern)
            index = repo.index
            # Changes outside the pattern leave nothing staged
            staged = index.diff("HEAD") if repo.head.is_valid() else list(index.entries)
            if not staged:
                raise NoChangesToCommit(work_dir)
            commit = index.commit(message, author=actor, committer=actor)
        except GitCommandError as e:
            raise GitOperationError(f"commit in {work_dir} failed: {_stderr(e)}") from e
        except (ValueError, OSError) as e:
            raise GitOperationError(f"commit in {work_dir} failed: {e}") from e

        logger.info("Created commit", work_dir=work_dir, hash=commit.hexsha)
        return commit.hexsha


def create_tag(
    work_dir: str, tag: str, message: str, tagger_name: str, tagger_email: str
) -> str:
    """
    Create an annotated tag at HEAD.

    An empty tagger name or email falls back to a fixed CI identity, so the
    tag never depends on the host's git configuration.

    Returns:
        Hash of the tag object

    Raises:
        RepositoryOpenError: If ``work_dir`` is not a repository
        GitOperationError: If HEAD cannot be resolved or tagging fails
    """
    with open_repository(work_dir) as repo:
        try:
            head = repo.head.commit
        except ValueError as e:
            raise GitOperationError(f"cannot resolve HEAD in {work_dir}: {e}") from e

        # The tagger identity comes from the committer variables
        env = {
            "GIT_COMMITTER_NAME": tagger_name or DEFAULT_TAGGER_NAME,
            "GIT_COMMITTER_EMAIL": tagger_email or DEFAULT_TAGGER_EMAIL,
        }

        try:
            with repo.git.custom_environment(**env):
                tag_ref = repo.create_tag(tag, ref=head, message=message)
        except GitCommandError as e:
            raise GitOperationError(f"creating tag {tag!r} failed: {_stderr(e)}") from e

        tag_hash = tag_ref.tag.hexsha if tag_ref.tag is not None else head.hexsha
        logger.info("Created tag", work_dir=work_dir, tag=tag, hash=tag_hash)
        return tag_hash


def push(
    work_dir: str,
    repository: str,
    ref_specs: list[str],
    auth: ResolvedAuth | None = None,
    proxy: ProxyConfig | None = None,
    attempts: int = 1,
) -> None:
    """
    Push ``ref_specs`` from the repository in ``work_dir`` to ``repository``.

    Raises:
        ConfigResolutionError: If the repository URL is empty
        RepositoryOpenError: If ``work_dir`` is not a repository
        TransportError: If the push fails
    """
    if not repository:
        raise ConfigResolutionError("repository URL is empty")

    env = git_environment(auth, proxy)
    with open_repository(work_dir) as repo:
        _with_retry(attempts, _push, repo, repository, ref_specs, env)


def _push(repo: Repo, repository: str, ref_specs: list[str], env: dict[str, str]) -> None:
    logger.info(
        "Pushing repository",
        repository=redact_url(repository),
        work_dir=repo.working_dir,
        ref_specs=ref_specs,
    )
    try:
        with repo.git.custom_environment(**env):
            repo.git.push(repository, *ref_specs)
    except GitCommandError as e:
        raise TransportError(f"push to {redact_url(repository)} failed: {_stderr(e)}") from e


def parse_time_bound(value: str, end_of_day: bool = False) -> datetime | None:
    """
    Parse a log window bound given as ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM:SS`` (UTC).

    A bare date means the start of that day, or its last second when
    ``end_of_day`` is set. Empty or unparsable values mean "unbounded".

    Examples:
        >>> parse_time_bound("2024-01-15", end_of_day=True)
        datetime.datetime(2024, 1, 15, 23, 59, 59, tzinfo=datetime.timezone.utc)
    """
    value = value.strip()
    if not value:
        return None
    if len(value) == LOG_DATE_LENGTH:
        value += LOG_END_OF_DAY if end_of_day else LOG_START_OF_DAY
    try:
        return datetime.strptime(value, LOG_TIME_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        logger.warning("Ignoring unparsable time bound", value=value)
        return None


def _merge_tag(repo: Repo, commit: Commit) -> str:
    """Extract the ``mergetag`` header of a raw commit object, if any."""
    raw = repo.odb.stream(commit.binsha).read()
    header = raw.split(b"\n\n", 1)[0]
    lines: list[bytes] = []
    for line in header.split(b"\n"):
        if line.startswith(b"mergetag "):
            lines.append(line[len(b"mergetag ") :])
        elif lines and line.startswith(b" "):
            lines.append(line[1:])
        elif lines:
            break
    if not lines:
        return ""
    return b"\n".join(lines).decode("utf-8", errors="replace") + "\n"


def _to_entry(repo: Repo, commit: Commit) -> LogEntry:
    message = commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return LogEntry(
        hash=commit.hexsha,
        author=Committer(
            name=commit.author.name or "",
            email=commit.author.email or "",
            when=commit.authored_datetime,
        ),
        committer=Committer(
            name=commit.committer.name or "",
            email=commit.committer.email or "",
            when=commit.committed_datetime,
        ),
        merge_tag=_merge_tag(repo, commit),
        message=message,
        tree_hash=commit.tree.hexsha,
        encoding=commit.encoding or "",
    )


def query_log(
    work_dir: str,
    limit: int = 0,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[LogEntry]:
    """
    Walk history from HEAD, newest committer time first.

    Args:
        work_dir: Local directory of the working copy
        limit: Maximum number of entries, 0 for no limit
        start: Inclusive lower bound on committer time, None for unbounded
        end: Inclusive upper bound on committer time, None for unbounded

    Returns:
        Matching log entries, newest first

    Raises:
        RepositoryOpenError: If ``work_dir`` is not a repository
        GitOperationError: If history cannot be read
    """
    entries: list[LogEntry] = []
    with open_repository(work_dir) as repo:
        try:
            for commit in repo.iter_commits("HEAD"):
                when = commit.committed_datetime
                if (start is not None and when < start) or (end is not None and when > end):
                    continue
                entries.append(_to_entry(repo, commit))
                if limit and len(entries) >= limit:
                    break
        except GitCommandError as e:
            raise GitOperationError(f"reading history of {work_dir} failed: {_stderr(e)}") from e
        except ValueError as e:
            raise GitOperationError(f"reading history of {work_dir} failed: {e}") from e

    logger.info("Read git log", work_dir=work_dir, entries=len(entries), limit=limit)
    return entries
