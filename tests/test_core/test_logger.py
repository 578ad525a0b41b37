import logging

from loguru import logger

from cinelist.core.logger import configure_logging


def test_stdlib_records_reach_loguru_with_component():
    configure_logging("client", level="INFO")
    seen = []
    sink_id = logger.add(lambda msg: seen.append(msg.record), level="INFO")
    try:
        logging.getLogger("cinelist.client.test").warning("cache drained")
    finally:
        logger.remove(sink_id)

    (record,) = [r for r in seen if r["message"] == "cache drained"]
    assert record["extra"]["component"] == "client"
    assert record["extra"]["request_id"] == "-"
    assert record["level"].name == "WARNING"


def test_request_id_is_bound_in_context():
    configure_logging("api", level="INFO")
    seen = []
    sink_id = logger.add(lambda msg: seen.append(msg.record), level="INFO")
    try:
        with logger.contextualize(request_id="abc"):
            logging.getLogger("cinelist.api").info("handled")
    finally:
        logger.remove(sink_id)

    assert [r["extra"]["request_id"] for r in seen if r["message"] == "handled"] == ["abc"]
