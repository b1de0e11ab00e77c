from logger import intake_logger, json_logger


def _capture(fmt):
    messages = []
    sink_id = json_logger.add(messages.append, format=fmt)
    return messages, sink_id


def test_intake_logger_binds_user_and_project():
    messages, sink_id = _capture("{extra[user_id]} {extra[project_id]} {message}")
    try:
        intake_logger("u-1", "p-1").info("saved")
        intake_logger("u-2").info("draft")
    finally:
        json_logger.remove(sink_id)

    assert [m.strip() for m in messages] == ["u-1 p-1 saved", "u-2 - draft"]


def test_unbound_records_use_placeholders():
    messages, sink_id = _capture("{extra[user_id]}|{extra[project_id]}")
    try:
        json_logger.info("startup")
    finally:
        json_logger.remove(sink_id)

    assert messages[0].strip() == "-|-"
