"""Unit tests for the command line entry point."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from loguru import logger
from typer.testing import CliRunner

from ci_nodes.constants import NODE_GIT_CLONE, NODE_PS
from ci_nodes.main import app, parse_metadata, run_chain
from ci_nodes.models.config import ChainConfig
from ci_nodes.models.message import RuleMsg

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logger():
    """Re-attach the default sink after commands reconfigure logging."""
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestParseMetadata:
    """Test parse_metadata function."""

    def test_pairs(self) -> None:
        """Test key=value pairs."""
        assert parse_metadata(["ref=main", "gitHttpUrl=https://x/r.git?a=b"]) == {
            "ref": "main",
            "gitHttpUrl": "https://x/r.git?a=b",
        }

    def test_empty(self) -> None:
        """Test no pairs."""
        assert parse_metadata(None) == {}

    @pytest.mark.parametrize("pair", ["novalue", "=value"])
    def test_invalid(self, pair: str) -> None:
        """Test malformed pairs."""
        with pytest.raises(typer.BadParameter):
            parse_metadata([pair])


class TestRunChain:
    """Test run_chain function."""

    def test_stops_at_first_failure(self) -> None:
        """Test nodes after a failure do not run."""
        chain = ChainConfig.model_validate(
            {
                "nodes": [
                    {"id": "clone", "type": NODE_GIT_CLONE},
                    {"id": "ps", "type": NODE_PS, "configuration": {"options": ["host/info"]}},
                ]
            }
        )
        results = run_chain(chain, RuleMsg())

        assert len(results) == 1
        definition, outcome = results[0]
        assert definition.id == "clone"
        assert not outcome.success

    def test_metadata_flows_between_nodes(self) -> None:
        """Test later nodes see metadata written by earlier ones."""
        chain = ChainConfig.model_validate(
            {
                "nodes": [
                    {"id": "ps", "type": NODE_PS, "configuration": {"options": ["host/info"]}},
                    {
                        "id": "clone",
                        "type": NODE_GIT_CLONE,
                        "configuration": {"repository": "https://example/repo.git"},
                    },
                ]
            }
        )
        msg = RuleMsg(metadata={"workDir": "/base"})
        with patch("ci_nodes.nodes.git_clone.clone_or_pull") as mock_clone:
            results = run_chain(chain, msg)

        assert [o.success for _, o in results] == [True, True]
        assert mock_clone.call_args.args[:2] == ("https://example/repo.git", "/base/repo")
        assert msg.metadata["workDir"] == "/base/repo"
        assert "host/info" in msg.data

    def test_unknown_node_type(self) -> None:
        """Test an unknown node type is a configuration error."""
        chain = ChainConfig.model_validate({"nodes": [{"id": "x", "type": "ci/nope"}]})
        with pytest.raises(ValueError):
            run_chain(chain, RuleMsg())


class TestCli:
    """Test CLI commands."""

    def test_list_nodes(self) -> None:
        """Test list-nodes prints every registered type."""
        result = runner.invoke(app, ["list-nodes"])
        assert result.exit_code == 0
        assert NODE_GIT_CLONE in result.output
        assert NODE_PS in result.output

    def test_run_missing_file(self, tmp_path: Path) -> None:
        """Test a missing chain file exits with 1."""
        result = runner.invoke(app, ["run", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1

    def test_run_ps_chain(self, tmp_path: Path) -> None:
        """Test a successful chain exits with 0."""
        chain_file = tmp_path / "chain.yaml"
        chain_file.write_text(
            "name: metrics\n"
            "nodes:\n"
            "  - id: ps\n"
            "    type: ci/ps\n"
            "    configuration:\n"
            "      options: [mem/virtualMemory]\n"
        )
        result = runner.invoke(app, ["run", str(chain_file), "-m", "ref=main"])
        assert result.exit_code == 0
        assert "Chain Summary" in result.output

    def test_run_failing_chain(self, tmp_path: Path) -> None:
        """Test a failing node exits with 1."""
        chain_file = tmp_path / "chain.yaml"
        chain_file.write_text("nodes:\n  - id: clone\n    type: ci/gitClone\n")
        result = runner.invoke(app, ["run", str(chain_file)])
        assert result.exit_code == 1
