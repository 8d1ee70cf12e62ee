from __future__ import annotations

import json
from pathlib import Path

import pytest

YAML_CONTENT = """\
SOME_INT: 1
SOME_FLOAT: 1.1
SOME_UINT: 999
SOME_VEC:
  - "1"
  - "2"
  - "3"
SOME_OBJ:
  TEST_KEY_INT: 1
  TEST_KEY_FLOAT: 1.1
  TEST_KEY_VEC:
    - a
    - b
    - c
"""

JSON_CONTENT = {
    "someInt": 42,
    "someFloat": 42.1,
    "someString": "Hello World!",
    "someBool": True,
    "someNull": None,
    "someList": [1, 2, 3],
    "someObject": {"host": "localhost", "port": 5432},
}


@pytest.fixture
def yaml_config(tmp_path: Path) -> Path:
    path = tmp_path / "test.yaml"
    path.write_text(YAML_CONTENT, encoding="utf-8")
    return path


@pytest.fixture
def json_config(tmp_path: Path) -> Path:
    path = tmp_path / "test.json"
    path.write_text(json.dumps(JSON_CONTENT), encoding="utf-8")
    return path
