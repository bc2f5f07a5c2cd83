"""
Global pytest configuration and fixtures.
"""

import pytest
import yaml


@pytest.fixture
def write_yaml(tmp_path):
    """Write a YAML document under tmp_path and return its path."""

    def _write(name, data):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write
