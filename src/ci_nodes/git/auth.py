"""Authentication method selection.

Maps an authentication-type tag plus credential fields to a concrete
credential object for the git transport.
"""

import re
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ci_nodes.constants import DEFAULT_SSH_USER
from ci_nodes.exceptions import ConfigResolutionError, UnsupportedAuthType
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)

# OpenSSH, PKCS#1, SEC1 and PKCS#8 (plain or encrypted) PEM private keys
_PRIVATE_KEY_HEADER = re.compile(rb"-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY-----")


class AuthType(StrEnum):
    """Known authentication variants. An empty tag means anonymous access."""

    NONE = ""
    SSH_KEY = "ssh-key"
    USERNAME_PASSWORD = "username-password"
    TOKEN = "token"

    @classmethod
    def parse(cls, tag: str) -> "AuthType":
        """Parse a configured tag, accepting the legacy ``ssh``/``password`` synonyms.

        Raises:
            UnsupportedAuthType: If the tag matches no variant
        """
        tag = tag.strip()
        if tag == "ssh":
            return cls.SSH_KEY
        if tag == "password":
            return cls.USERNAME_PASSWORD
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedAuthType(tag) from None


class SshKeyAuth(BaseModel):
    """SSH private key identity."""

    model_config = ConfigDict(frozen=True)

    user: str = Field(default=DEFAULT_SSH_USER)
    key_file: Path
    passphrase: SecretStr | None = None


class BasicAuth(BaseModel):
    """HTTP basic credentials. Tokens travel as the password."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


ResolvedAuth = SshKeyAuth | BasicAuth


def is_ssh(auth_type: str) -> bool:
    """Return True if the tag selects SSH key authentication (no error on unknown tags)."""
    return auth_type.strip() in (AuthType.SSH_KEY.value, "ssh")


def select_auth_method(
    auth_type: str,
    user: str = "",
    password: str = "",
    pem_file: str = "",
) -> ResolvedAuth | None:
    """
    Build the credential object for an authentication tag.

    An empty tag is not an unknown tag: it selects anonymous access and
    returns None. Any other tag outside the known variants and their
    synonyms raises ``UnsupportedAuthType``.

    Args:
        auth_type: ssh-key|ssh, username-password|password, token, or "" for none
        user: User name (SSH login user for ssh-key)
        password: Password, token, or SSH key passphrase
        pem_file: SSH private key path

    Returns:
        Credential object, or None for anonymous access (empty tag)

    Raises:
        UnsupportedAuthType: If a non-empty tag is not recognised
        ConfigResolutionError: If ssh-key is selected without a key file, or
            the file does not hold a PEM private key
        OSError: If the key file cannot be read
    """
    match AuthType.parse(auth_type):
        case AuthType.NONE:
            return None
        case AuthType.SSH_KEY:
            if not pem_file:
                raise ConfigResolutionError("ssh-key authentication requires authPemFile")
            key_file = Path(pem_file).expanduser()
            # Fail here rather than inside the ssh subprocess
            if not _PRIVATE_KEY_HEADER.search(key_file.read_bytes()):
                raise ConfigResolutionError(f"{key_file} is not a PEM private key")
            return SshKeyAuth(
                user=user or DEFAULT_SSH_USER,
                key_file=key_file,
                passphrase=SecretStr(password) if password else None,
            )
        case AuthType.USERNAME_PASSWORD | AuthType.TOKEN:
            return BasicAuth(username=user, password=SecretStr(password))
