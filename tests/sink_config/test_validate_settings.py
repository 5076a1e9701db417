import logging

from src import settings
from src.sink_config.validate_settings import main


def test_valid_file_exits_zero(tmp_path, caplog):
    path = tmp_path / "settings.yml"
    path.write_text("topic.t.ks.tbl.mapping: 'col1=value.f1'\n")
    with caplog.at_level(logging.INFO, logger=settings.LOGGER_NAME):
        assert main([str(path)]) == 0
    assert "col1=value.f1" in caplog.text


def test_invalid_file_exits_one_and_logs_every_violation(tmp_path, caplog):
    path = tmp_path / "settings.yml"
    path.write_text("topic.t.ks.tbl.mapping: 'col1'\ntopic.t.ks.tbl.ttl: -3\n")
    with caplog.at_level(logging.INFO, logger=settings.LOGGER_NAME):
        assert main([str(path)]) == 1
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert any("topic.t.ks.tbl.ttl" in r.getMessage() for r in errors)
    assert any("topic.t.ks.tbl.mapping" in r.getMessage() for r in errors)


def test_file_without_tables_warns(tmp_path, caplog):
    path = tmp_path / "settings.yml"
    path.write_text("contactPoints: 127.0.0.1\n")
    with caplog.at_level(logging.INFO, logger=settings.LOGGER_NAME):
        assert main([str(path)]) == 0
    assert "No table settings found" in caplog.text
