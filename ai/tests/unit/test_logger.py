import logging

from flashdeck.utils import get_logger, log_error, set_request_context


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_request_context_injected():
    logger = get_logger()
    handler = _Capture()
    logger.addHandler(handler)
    previous = logger.level
    logger.setLevel(logging.INFO)
    try:
        set_request_context('req-42')
        logger.info('ambient')
        logger.info('explicit', extra={'request_id': 'other'})
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
        set_request_context(None)
    assert handler.records[0].request_id == 'req-42'
    assert handler.records[1].request_id == 'other'


def test_get_logger_is_configured_once():
    logger = get_logger()
    count = len(logger.handlers)
    assert get_logger() is logger
    assert len(logger.handlers) == count


def test_log_error_records_traceback_and_context():
    logger = get_logger()
    handler = _Capture()
    logger.addHandler(handler)
    try:
        try:
            raise RuntimeError('deck table locked')
        except RuntimeError as e:
            log_error(e, {'request_id': 'req-7', 'path': '/decks'})
    finally:
        logger.removeHandler(handler)
    record = handler.records[0]
    assert record.levelno == logging.ERROR
    assert record.exc_info[1].args == ('deck table locked',)
    assert record.request_id == 'req-7'
    assert record.path == '/decks'
