import json
import logging

from bananaships.game.infra.logging import JsonFormatter, LoggingConfig, configure_logging, setup_logging


def test_json_formatter_includes_fields_and_message() -> None:
    logger = logging.getLogger("test.json.formatter")
    record = logger.makeRecord(
        name=logger.name,
        level=logging.INFO,
        fn=__file__,
        lno=1,
        msg="event_rejected seq=%s",
        args=(4,),
        exc_info=None,
        extra={"custom": 1},
    )
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "event_rejected seq=4"
    assert payload["level"] == "INFO"
    assert payload["fields"] == {"custom": 1}


def test_setup_logging_text_and_json(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.delenv("BANANASHIPS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("BANANASHIPS_LOG_FILE", raising=False)
    setup_logging()
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("BANANASHIPS_LOG_LEVEL", "warning")
    setup_logging()
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_log_file_receives_json_lines(tmp_path) -> None:
    log_file = tmp_path / "logs" / "bananaships.jsonl"
    configure_logging(LoggingConfig(level_name="INFO", file_path=str(log_file)))

    logging.getLogger("test.logging.file").info("client_connect user=%s", "alice")
    configure_logging(LoggingConfig(level_name="INFO"))

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert any(json.loads(line)["msg"] == "client_connect user=alice" for line in lines)
