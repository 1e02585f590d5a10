"""Node base classes and shared git field resolution."""

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from ci_nodes.constants import KEY_GIT_HTTP_URL, KEY_GIT_SSH_URL, KEY_REF, KEY_WORK_DIR
from ci_nodes.context import RuleContext
from ci_nodes.exceptions import ConfigResolutionError, NodeError
from ci_nodes.git.auth import ResolvedAuth, is_ssh, select_auth_method
from ci_nodes.git.transport import derive_work_dir, repo_name
from ci_nodes.models.config import GitConnectionConfig, NodeConfig, ProxyConfig
from ci_nodes.models.message import RuleMsg
from ci_nodes.utils.logging import get_logger
from ci_nodes.utils.template import build_environment, has_variable, render

logger = get_logger(__name__)


class Node(ABC):
    """
    A pluggable step invoked once per message.

    Subclasses validate their configuration in ``init`` and do the actual
    work in ``process``, raising ``NodeError`` on failure. ``on_msg`` turns
    the result into exactly one ``tell_success``/``tell_failure`` call and
    never raises.
    """

    node_type: ClassVar[str] = ""

    def __init__(self, configuration: Mapping[str, Any] | None = None) -> None:
        self.init(dict(configuration or {}))

    @abstractmethod
    def init(self, configuration: dict[str, Any]) -> None:
        """Validate and store the node configuration."""

    @abstractmethod
    def process(self, msg: RuleMsg) -> None:
        """Handle one message, mutating its data/metadata in place."""

    def on_msg(self, ctx: RuleContext, msg: RuleMsg) -> None:
        try:
            self.process(msg)
        except NodeError as e:
            e.node_type = e.node_type or self.node_type
            logger.error(
                f"{self.node_type} failed: {e}", msg_id=msg.id, error_type=type(e).__name__
            )
            ctx.tell_failure(msg, e)
            return
        except Exception as e:
            logger.opt(exception=e).error(f"{self.node_type} failed unexpectedly: {e}")
            ctx.tell_failure(msg, e)
            return
        ctx.tell_success(msg)

    def destroy(self) -> None:
        """Release node resources. Nodes hold none between calls."""


class BaseGitNode(Node):
    """
    Git node with the shared connection fields.

    The shared ``GitConnectionConfig`` and the operation-specific config are
    both parsed from the same flat configuration mapping. Field resolution
    follows one precedence for every git node: a non-empty configured value
    wins (rendered when it carries markers), an empty one falls back to the
    well-known metadata key.
    """

    config_model: ClassVar[type[NodeConfig] | None] = None

    def init(self, configuration: dict[str, Any]) -> None:
        self.git_config = GitConnectionConfig.model_validate(configuration)
        self.config = (
            self.config_model.model_validate(configuration) if self.config_model else None
        )
        values = self.git_config.templated_values()
        if self.config is not None:
            values += self.config.templated_values()
        self.has_var = any(has_variable(value) for value in values)

    def environment(self, msg: RuleMsg) -> dict[str, Any] | None:
        """Template environment for this call, None when no field needs one."""
        return build_environment(msg) if self.has_var else None

    @staticmethod
    def resolve(value: str, env: dict[str, Any] | None) -> str:
        return render(value, env) if env is not None else value

    @staticmethod
    def require(value: str, field: str) -> str:
        if not value:
            raise ConfigResolutionError(f"{field} resolved to an empty value")
        return value

    def get_repository(self, msg: RuleMsg, env: dict[str, Any] | None) -> str:
        repository = self.git_config.repository
        if not repository:
            key = KEY_GIT_SSH_URL if is_ssh(self.git_config.auth_type) else KEY_GIT_HTTP_URL
            return msg.get_metadata(key)
        return self.resolve(repository, env)

    def get_work_dir(self, msg: RuleMsg, env: dict[str, Any] | None) -> str:
        repository = self.get_repository(msg, env)
        directory = self.git_config.directory
        if directory:
            return derive_work_dir(self.resolve(directory, env), repository)

        # A workDir written by an earlier node already names the repository
        work_dir = msg.get_metadata(KEY_WORK_DIR)
        name = repo_name(repository)
        if work_dir and name and os.path.basename(os.path.normpath(work_dir)) == name:
            return os.path.normpath(work_dir)
        return derive_work_dir(work_dir, repository)

    def get_reference(self, msg: RuleMsg, env: dict[str, Any] | None) -> str:
        reference = self.git_config.reference
        if not reference:
            return msg.get_metadata(KEY_REF)
        return self.resolve(reference, env)

    def get_ref_specs(self, msg: RuleMsg, env: dict[str, Any] | None) -> list[str]:
        ref_specs = self.resolve(self.git_config.ref_specs, env)
        return [item.strip() for item in ref_specs.split(",") if item.strip()]

    def get_auth_method(self) -> ResolvedAuth | None:
        return select_auth_method(
            self.git_config.auth_type,
            self.git_config.auth_user,
            self.git_config.auth_password,
            self.git_config.auth_pem_file,
        )

    def get_proxy(self) -> ProxyConfig | None:
        return self.git_config.proxy
