"""Pytest configuration and fixtures for CLI tests."""

import json

import pytest
import yaml
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project configuration files out of CLI tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("COLLECTIONKIT_PAGE_SIZE", raising=False)
    monkeypatch.delenv("COLLECTIONKIT_TRACK_BY", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cli_runner():
    """Click CLI test runner bound to the collectionkit command group."""

    class CollectionKitCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from collectionkit.cli.main import cli

            kwargs.setdefault("obj", {})
            return super().invoke(cli, args, **kwargs)

    return CollectionKitCliRunner()


@pytest.fixture
def write_items(tmp_path):
    """Write items to a JSON (or YAML) file and return its path."""

    def writer(items, name="items.json"):
        path = tmp_path / name
        if path.suffix in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(items))
        else:
            path.write_text(json.dumps(items))
        return path

    return writer


@pytest.fixture
def write_config(tmp_path):
    def writer(config, name="config.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(config))
        return path

    return writer


@pytest.fixture
def numbered_items():
    return [{"id": i, "name": f"item {i}"} for i in range(1, 6)]


@pytest.fixture
def tree_items():
    return [
        {"id": "a", "name": "Alpha"},
        {"id": "a.1", "parent": "a", "name": "Alpha one"},
        {"id": "a.2", "parent": "a", "name": "Alpha two"},
        {"id": "b", "name": "Beta"},
    ]


@pytest.fixture
def tree_config():
    return {"tree": {"id_field": "id", "parent_field": "parent"}}
