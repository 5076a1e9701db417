import pytest

from src.sink_config.errors import ConfigError
from src.sink_config.loader import load_settings


def write(tmp_path, text: str):
    path = tmp_path / "settings.yml"
    path.write_text(text)
    return path


def test_flat_keys_are_kept_and_scalars_stringified(tmp_path):
    path = write(
        tmp_path,
        "topic.t.ks.tbl.mapping: 'col1=value.f1, col2=key.f1'\n"
        "topic.t.ks.tbl.ttl: 100\n"
        "topic.t.ks.tbl.deletesEnabled: false\n",
    )
    assert load_settings(path) == {
        "topic.t.ks.tbl.mapping": "col1=value.f1, col2=key.f1",
        "topic.t.ks.tbl.ttl": "100",
        "topic.t.ks.tbl.deletesEnabled": "false",
    }


def test_nested_mappings_are_flattened(tmp_path):
    path = write(
        tmp_path,
        """
topic:
  t:
    ks:
      tbl:
        mapping: c=value
        nullToUnset: true
contactPoints: 127.0.0.1
""",
    )
    assert load_settings(str(path)) == {
        "topic.t.ks.tbl.mapping": "c=value",
        "topic.t.ks.tbl.nullToUnset": "true",
        "contactPoints": "127.0.0.1",
    }


def test_empty_file_is_an_empty_bag(tmp_path):
    assert load_settings(write(tmp_path, "")) == {}


def test_non_mapping_document_is_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(write(tmp_path, "- a\n- b\n"))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yml")
