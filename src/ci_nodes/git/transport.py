"""Repository naming and git transport environment.

GitPython drives the git executable, so credentials, proxy and TLS settings
are handed to each git process through environment variables
(``GIT_CONFIG_COUNT``/``GIT_CONFIG_KEY_n``/``GIT_CONFIG_VALUE_n`` and
``GIT_SSH_COMMAND``) instead of being written to the repository config. An SSH
key passphrase travels in the process environment and is read back by a
small askpass helper, so it never lands on disk or in a command line.
"""

import base64
import functools
import os
import shlex
import stat
import tempfile
from urllib.parse import quote, urlsplit, urlunsplit

from ci_nodes.constants import ASKPASS_ENV_VAR, GIT_SUFFIX
from ci_nodes.git.auth import BasicAuth, ResolvedAuth, SshKeyAuth
from ci_nodes.models.config import ProxyConfig
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)


def repo_name(repo_url: str) -> str:
    """Short repository name: last URL segment without a trailing ``.git``.

    Examples:
        >>> repo_name("https://github.com/org/project.git")
        'project'
        >>> repo_name("git@github.com:org/project.git")
        'project'
    """
    name = repo_url.rstrip("/").split("/")[-1]
    return name.removesuffix(GIT_SUFFIX)


def derive_work_dir(base_dir: str, repo_url: str) -> str:
    """Join the base directory with the repository's short name.

    Examples:
        >>> derive_work_dir("/base", "https://example/repo.git")
        '/base/repo'
    """
    name = repo_name(repo_url)
    if not base_dir and not name:
        return ""
    return os.path.normpath(os.path.join(base_dir, name))


def short_ref(reference: str) -> str:
    """Strip ``refs/heads/`` or ``refs/tags/`` for git options that want a short name."""
    for prefix in ("refs/heads/", "refs/tags/"):
        if reference.startswith(prefix):
            return reference.removeprefix(prefix)
    return reference


def _proxy_url(proxy: ProxyConfig) -> str:
    url = proxy.url if "://" in proxy.url else f"http://{proxy.url}"
    if not proxy.username:
        return url
    parts = urlsplit(url)
    userinfo = quote(proxy.username, safe="")
    if proxy.password:
        userinfo += ":" + quote(proxy.password, safe="")
    host = parts.hostname or ""
    if parts.port:
        host += f":{parts.port}"
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, ""))


@functools.cache
def askpass_helper() -> str:
    """
    Path of an executable that prints the passphrase held in the
    ``ASKPASS_ENV_VAR`` environment variable.

    Written once per process into a private temporary directory; the script
    holds no secret itself.
    """
    directory = tempfile.mkdtemp(prefix="ci-nodes-askpass-")
    path = os.path.join(directory, "askpass.sh")
    with open(path, "w") as f:
        f.write(f"#!/bin/sh\nprintf '%s\\n' \"${ASKPASS_ENV_VAR}\"\n")
    os.chmod(path, stat.S_IRWXU)
    logger.debug("Created ssh askpass helper", path=path)
    return path


def git_environment(
    auth: ResolvedAuth | None = None, proxy: ProxyConfig | None = None
) -> dict[str, str]:
    """
    Build environment variables for one git invocation.

    TLS certificate verification is always disabled for HTTPS remotes.

    Args:
        auth: Resolved credentials, None for anonymous access
        proxy: Proxy settings, None for a direct connection

    Returns:
        Environment variables to add to the git process
    """
    config: list[tuple[str, str]] = [("http.sslVerify", "false")]
    env: dict[str, str] = {"GIT_TERMINAL_PROMPT": "0"}

    if proxy is not None:
        config.append(("http.proxy", _proxy_url(proxy)))

    match auth:
        case BasicAuth(username=username, password=password):
            token = f"{username}:{password.get_secret_value()}".encode()
            header = "Authorization: Basic " + base64.b64encode(token).decode("ascii")
            config.append(("http.extraHeader", header))
        case SshKeyAuth(user=user, key_file=key_file, passphrase=passphrase):
            command = [
                "ssh",
                "-i",
                str(key_file),
                "-l",
                user,
                "-o",
                "IdentitiesOnly=yes",
                "-o",
                "StrictHostKeyChecking=accept-new",
            ]
            if passphrase is None:
                command += ["-o", "BatchMode=yes"]
            else:
                # BatchMode would also disable the askpass prompt
                env["SSH_ASKPASS"] = askpass_helper()
                env["SSH_ASKPASS_REQUIRE"] = "force"
                env[ASKPASS_ENV_VAR] = passphrase.get_secret_value()
            env["GIT_SSH_COMMAND"] = shlex.join(command)

    env["GIT_CONFIG_COUNT"] = str(len(config))
    for index, (key, value) in enumerate(config):
        env[f"GIT_CONFIG_KEY_{index}"] = key
        env[f"GIT_CONFIG_VALUE_{index}"] = value
    return env
