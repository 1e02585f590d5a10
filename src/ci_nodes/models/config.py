"""Configuration models for nodes and rule chains."""

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ci_nodes.constants import DEFAULT_LOG_LIMIT, DEFAULT_RETRY_ATTEMPTS


class NodeConfig(BaseModel):
    """Base configuration for a node.

    Accepts camelCase keys (``authType``) as well as snake_case ones and
    ignores keys that belong to a sibling configuration parsed from the same
    mapping. Instances are frozen once validated.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    # Names of string fields that may carry template markers
    templated_fields: ClassVar[tuple[str, ...]] = ()

    def templated_values(self) -> list[str]:
        """Return the raw values of all fields that may be rendered."""
        return [getattr(self, name) for name in self.templated_fields]


class ProxyConfig(BaseModel):
    """Proxy used for git transport."""

    url: str = Field(default="", description="Proxy URL")
    username: str = Field(default="", description="Proxy user")
    password: str = Field(default="", description="Proxy password")


class GitConnectionConfig(NodeConfig):
    """Fields shared by every git node: repository, directory, auth and proxy."""

    templated_fields: ClassVar[tuple[str, ...]] = (
        "repository",
        "directory",
        "reference",
        "ref_specs",
    )

    repository: str = Field(default="", description="Git repository URL")
    directory: str = Field(default="", description="Base directory the repository lives under")
    reference: str = Field(default="", description="Branch or tag reference name")
    ref_specs: str = Field(
        default="",
        description="Comma separated local:remote mappings, e.g. refs/heads/a:refs/heads/a",
    )
    auth_type: str = Field(
        default="", description="ssh-key|ssh, username-password|password, token"
    )
    auth_user: str = Field(default="", description="User name")
    auth_password: str = Field(default="", description="Password, token or key passphrase")
    auth_pem_file: str = Field(default="", description="SSH private key file path")
    proxy_url: str = Field(default="", description="Proxy URL")
    proxy_username: str = Field(default="", description="Proxy user")
    proxy_password: str = Field(default="", description="Proxy password")
    retry_attempts: int = Field(
        default=DEFAULT_RETRY_ATTEMPTS, ge=1, description="Transport attempts for clone/pull/push"
    )

    @property
    def proxy(self) -> ProxyConfig | None:
        """Proxy settings, or None when no proxy URL is configured."""
        if not self.proxy_url:
            return None
        return ProxyConfig(
            url=self.proxy_url, username=self.proxy_username, password=self.proxy_password
        )


class Signature(NodeConfig):
    """Author/tagger identity used for commits and tags."""

    author_name: str = Field(default="", description="Author name")
    author_email: str = Field(default="", description="Author email")


class GitCommitConfig(NodeConfig):
    """Commit node configuration."""

    templated_fields: ClassVar[tuple[str, ...]] = ("pattern", "message")

    pattern: str = Field(default=".", description="Pathspec of files to stage")
    message: str = Field(default="", description="Commit message")
    signature: Signature = Field(default_factory=Signature)

    def templated_values(self) -> list[str]:
        return [
            *super().templated_values(),
            self.signature.author_name,
            self.signature.author_email,
        ]


class GitCreateTagConfig(NodeConfig):
    """Create tag node configuration."""

    templated_fields: ClassVar[tuple[str, ...]] = ("tag", "message")

    tag: str = Field(default="", description="Tag name")
    message: str = Field(default="", description="Annotated tag message")
    signature: Signature = Field(default_factory=Signature)

    def templated_values(self) -> list[str]:
        return [
            *super().templated_values(),
            self.signature.author_name,
            self.signature.author_email,
        ]


class GitLogConfig(NodeConfig):
    """Log query node configuration."""

    templated_fields: ClassVar[tuple[str, ...]] = ("start_time", "end_time")

    limit: int = Field(default=DEFAULT_LOG_LIMIT, ge=0, description="Max entries, 0 = unbounded")
    start_time: str = Field(
        default="", description="yyyy-MM-dd or yyyy-MM-dd HH:mm:ss, inclusive lower bound"
    )
    end_time: str = Field(
        default="", description="yyyy-MM-dd or yyyy-MM-dd HH:mm:ss, inclusive upper bound"
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def strip_time(cls, v: str) -> str:
        return v.strip()


class PsConfig(NodeConfig):
    """Host metrics node configuration."""

    options: list[str] = Field(
        default_factory=list, description="Metric options to collect, empty means all"
    )

    @field_validator("options", mode="before")
    @classmethod
    def none_means_all(cls, v: Any) -> Any:
        return [] if v is None else v


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    serialize: bool = Field(default=False, description="Serialize file logs to JSON")
    colorize: bool = Field(default=True, description="Colorize console output")
    file_path: str = Field(default="logs/ci-nodes.log")
    rotation: str = Field(default="50 MB", description="Log rotation size/time")
    retention: str = Field(default="14 days", description="Log retention period")
    compression: str = Field(default="zip", description="Compression format for rotated logs")


class NodeDefinition(BaseModel):
    """One node in a rule chain file."""

    id: str = Field(description="Node id, unique within the chain")
    type: str = Field(description="Registered node type, e.g. ci/gitClone")
    configuration: dict[str, Any] = Field(default_factory=dict)


class ChainConfig(BaseModel):
    """A rule chain: nodes executed in order against one message."""

    name: str = Field(default="ci-chain")
    logging: LoggingConfig | None = Field(default=None)
    nodes: list[NodeDefinition] = Field(default_factory=list)
