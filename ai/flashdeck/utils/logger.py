import os
import sys
import logging
import pathlib
import contextvars
from logging.handlers import RotatingFileHandler
from pythonjsonlogger.json import JsonFormatter

_request_ctx_var = contextvars.ContextVar('request_ctx', default={})


def set_request_context(request_id: str):
    _request_ctx_var.set({'request_id': request_id})


def get_request_context():
    return _request_ctx_var.get()


def _inject_request_context(record):
    # explicit extra={'request_id': ...} wins over the ambient context
    if getattr(record, 'request_id', None) is None:
        record.request_id = get_request_context().get('request_id')
    return True


def _file_handlers(log_dir: str, fmt: logging.Formatter):
    log_path = pathlib.Path(log_dir)
    if not log_path.is_absolute():
        log_path = pathlib.Path(os.getcwd()) / log_path
    log_path.mkdir(parents=True, exist_ok=True)
    max_size = int(os.getenv('LOG_MAX_SIZE', str(10 * 1024 * 1024)))
    max_files = int(os.getenv('LOG_MAX_FILES', '7'))

    combined = RotatingFileHandler(log_path / 'combined.log', maxBytes=max_size, backupCount=max_files)
    combined.setFormatter(fmt)

    errors = RotatingFileHandler(log_path / 'error.log', maxBytes=max_size, backupCount=max_files)
    errors.setLevel(logging.ERROR)
    errors.setFormatter(fmt)
    return [combined, errors]


def get_logger(name: str = 'flashdeck'):
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')
    # empty LOG_FILE_PATH logs to stdout only
    LOG_FILE_PATH = os.getenv('LOG_FILE_PATH', 'logs')

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL.upper())
    if LOG_FORMAT == 'json':
        fmt = JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s')

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    if LOG_FILE_PATH:
        for handler in _file_handlers(LOG_FILE_PATH, fmt):
            logger.addHandler(handler)

    f = logging.Filter()
    f.filter = _inject_request_context
    logger.addFilter(f)

    logging.captureWarnings(True)

    return logger


def log_request(request_id: str, method: str, path: str, status_code: int, duration_ms: float, ip: str = None):
    logger = get_logger()
    logger.info('http_request', extra={'request_id': request_id, 'method': method, 'path': path, 'status_code': status_code, 'duration_ms': duration_ms, 'ip': ip})


def log_error(error: Exception, context: dict = None):
    logger = get_logger()
    logger.error('error', exc_info=(type(error), error, error.__traceback__), extra=context or {})


def log_llm_call(request_id: str, provider: str, model: str, prompt_tokens: int, completion_tokens: int, duration_ms: float):
    logger = get_logger()
    logger.info('llm_call', extra={
        'request_id': request_id,
        'provider': provider,
        'model': model,
        'prompt_tokens': prompt_tokens,
        'completion_tokens': completion_tokens,
        'duration_ms': duration_ms,
    })


def log_flashcard_extraction(strategy: str, found: int, returned: int, truncated: bool, input_length: int):
    logger = get_logger()
    logger.info('flashcard_extraction', extra={
        'strategy': strategy,
        'found': found,
        'returned': returned,
        'truncated': truncated,
        'input_length': input_length,
    })


def log_flashcard_generation(request_id: str, flashcard_count: int, strategy: str, provider: str, duration_ms: float, deck_id: int = None):
    logger = get_logger()
    logger.info('flashcard_generation', extra={
        'request_id': request_id,
        'flashcard_count': flashcard_count,
        'strategy': strategy,
        'provider': provider,
        'duration_ms': duration_ms,
        'deck_id': deck_id,
    })
