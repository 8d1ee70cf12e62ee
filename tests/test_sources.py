from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import pytest

from confstack import (
    CommandLineSource,
    ConfigurationError,
    EnvironmentSource,
    FilePath,
    FileReadError,
    FileSource,
    FileType,
    JsonConfigReader,
    ParseError,
    YamlConfigReader,
    serialize_to_file,
)
from confstack.sources import reader_for


@pytest.mark.parametrize(
    "path, expected",
    [
        ("config.yaml", FileType.YAML),
        ("dir/config.json", FileType.JSON),
        ("config.yml", FileType.UNSUPPORTED),
        ("config.toml", FileType.UNSUPPORTED),
        ("config", FileType.UNSUPPORTED),
    ],
)
def test_file_type_is_derived_from_suffix(path: str, expected: FileType):
    # No file needs to exist
    assert FilePath(path).file_type() is expected


def test_source_identity():
    assert FileSource("a.json") == FileSource(FilePath("a.json"))
    assert FileSource(Path("a.json")) == FileSource("a.json")
    assert FileSource("a.json") != FileSource("b.json")
    assert len({FileSource("a.json"), FileSource("a.json")}) == 1

    assert EnvironmentSource() == EnvironmentSource()
    assert hash(EnvironmentSource()) == hash(EnvironmentSource())

    assert CommandLineSource(["--x", "1"]) == CommandLineSource(("--x", "1"))
    assert CommandLineSource(["--x"]) != CommandLineSource(["--y"])


def test_reader_for_dispatch():
    assert isinstance(reader_for(FileType.JSON), JsonConfigReader)
    assert isinstance(reader_for(FileType.YAML), YamlConfigReader)
    assert reader_for(FileType.UNSUPPORTED) is None


def test_json_reader_reads_top_level_mapping(json_config: Path):
    data = JsonConfigReader().read(json_config)

    assert data["someInt"] == 42
    assert data["someObject"] == {"host": "localhost", "port": 5432}


def test_yaml_reader_reads_top_level_mapping(yaml_config: Path):
    data = YamlConfigReader().read(str(yaml_config))

    assert data["SOME_INT"] == 1
    assert data["SOME_VEC"] == ["1", "2", "3"]
    assert data["SOME_OBJ"]["TEST_KEY_VEC"] == ["a", "b", "c"]


def test_reader_missing_file_raises_file_read_error(tmp_path: Path):
    missing = tmp_path / "no_file.yaml"

    with pytest.raises(FileReadError) as excinfo:
        YamlConfigReader().read(missing)

    assert excinfo.value.path == str(missing)
    assert "No such file or directory" in excinfo.value.detail
    assert str(excinfo.value) == (
        f"Failed to read configuration file: No such file or directory [{missing}]"
    )


def test_json_reader_invalid_content_raises_parse_error(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ParseError):
        JsonConfigReader().read(path)


def test_yaml_reader_invalid_content_raises_parse_error(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("a: [1, 2\n", encoding="utf-8")

    with pytest.raises(ParseError):
        YamlConfigReader().read(path)


def test_reader_rejects_non_mapping_root(tmp_path: Path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ParseError):
        JsonConfigReader().read(path)


def test_json_null_root_raises_parse_error(tmp_path: Path):
    path = tmp_path / "null.json"
    path.write_text("null", encoding="utf-8")

    with pytest.raises(ParseError):
        JsonConfigReader().read(path)


def test_deeply_nested_json_raises_parse_error(tmp_path: Path):
    depth = 10_000
    path = tmp_path / "deep.json"
    path.write_text('{"a": ' + "[" * depth + "]" * depth + "}", encoding="utf-8")

    with pytest.raises(ParseError):
        JsonConfigReader().read(path)


def test_deeply_nested_yaml_raises_parse_error(tmp_path: Path):
    depth = 10_000
    path = tmp_path / "deep.yaml"
    path.write_text("a: " + "[" * depth + "]" * depth + "\n", encoding="utf-8")

    with pytest.raises(ParseError):
        YamlConfigReader().read(path)


def test_yaml_scalar_keys_are_spelled_as_yaml(tmp_path: Path):
    path = tmp_path / "keys.yaml"
    path.write_text("true: 1\nnull: 2\non: 3\n4: four\n", encoding="utf-8")

    assert YamlConfigReader().read(path) == {
        "true": 3,
        "null": 2,
        "4": "four",
    }


def test_empty_yaml_file_reads_as_empty_mapping(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert YamlConfigReader().read(path) == {}


def test_yaml_dates_are_read_as_strings(tmp_path: Path):
    path = tmp_path / "dates.yaml"
    path.write_text("released: 2024-05-01\n", encoding="utf-8")

    assert YamlConfigReader().read(path) == {"released": "2024-05-01"}


def test_serialize_to_file_writes_pretty_json(tmp_path: Path):
    @dataclass
    class Database:
        host: str
        port: int

    target = tmp_path / "nested" / "db.json"
    serialize_to_file(Database(host="db.local", port=5433), target)

    assert json.loads(target.read_text(encoding="utf-8")) == {
        "host": "db.local",
        "port": 5433,
    }
    assert not (tmp_path / "nested" / "db.json.tmp").exists()


def test_serialize_to_file_rejects_unserializable_values(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        serialize_to_file(object(), tmp_path / "out.json")
