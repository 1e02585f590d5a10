"""Integration tests running a chain file end to end."""

import json
from pathlib import Path

import yaml
from git import Repo

from ci_nodes.main import run_chain
from ci_nodes.models.message import RuleMsg
from ci_nodes.utils.config_loader import load_chain_config


def test_release_chain(tmp_path: Path, remote_url: str, base_dir: Path) -> None:
    """Test clone, tag, push and log run in sequence sharing metadata."""
    chain_file = tmp_path / "chain.yaml"
    chain_file.write_text(
        yaml.safe_dump(
            {
                "name": "release",
                "nodes": [
                    {"id": "clone", "type": "ci/gitClone", "configuration": {"reference": "main"}},
                    {
                        "id": "tag",
                        "type": "ci/gitCreateTag",
                        "configuration": {
                            "tag": "build-${metadata.build}",
                            "message": "Build ${build}",
                            "signature": {"authorName": "CI", "authorEmail": "ci@example.com"},
                        },
                    },
                    {
                        "id": "push",
                        "type": "ci/gitPush",
                        "configuration": {"refSpecs": "refs/tags/*:refs/tags/*"},
                    },
                    {"id": "log", "type": "ci/gitLog", "configuration": {"limit": 1}},
                ],
            }
        )
    )
    chain = load_chain_config(chain_file)
    msg = RuleMsg(
        type="release",
        metadata={"workDir": str(base_dir), "gitHttpUrl": remote_url, "build": "42"},
    )

    results = run_chain(chain, msg)

    assert [d.id for d, _ in results] == ["clone", "tag", "push", "log"]
    assert all(o.success for _, o in results), [o.error for _, o in results]
    assert msg.metadata["workDir"] == str(base_dir / "project")

    remote = Repo(remote_url)
    assert remote.tags["build-42"].tag.hexsha == msg.metadata["hash"]
    head = remote.heads["main"].commit.hexsha
    remote.close()

    entries = json.loads(msg.data)
    assert [e["hash"] for e in entries] == [head]
