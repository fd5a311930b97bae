import io
import os
import uuid
import pathlib
from typing import Union

import pdfplumber

from flashdeck.utils import get_logger

LOG = get_logger()

UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'uploads')
MAX_UPLOAD_SIZE_MB = int(os.getenv('MAX_UPLOAD_SIZE_MB', '50'))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')


class FileProcessingError(Exception):
    """Raised when an upload cannot be saved or read."""


class FileTooLargeError(FileProcessingError):
    pass


def is_pdf_file(filename: str) -> bool:
    return pathlib.Path(filename or '').suffix.lower() == '.pdf'


def is_image_file(filename: str) -> bool:
    return pathlib.Path(filename or '').suffix.lower() in IMAGE_EXTENSIONS


def check_upload_size(size: int) -> None:
    if size > MAX_UPLOAD_SIZE_BYTES:
        raise FileTooLargeError(f'File too large ({size} bytes > {MAX_UPLOAD_SIZE_MB} MB)')


def save_upload(data: bytes, filename: str, upload_dir: str = None) -> str:
    """Write an upload under the upload dir with a unique prefix; returns the path."""
    check_upload_size(len(data))
    target_dir = pathlib.Path(upload_dir or UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    safe_name = pathlib.Path(filename or 'upload').name
    path = target_dir / f'{uuid.uuid4()}_{safe_name}'
    path.write_bytes(data)
    LOG.info('upload_saved', extra={'path': str(path), 'size': len(data)})
    return str(path)


def extract_text_from_pdf(source: Union[str, bytes]) -> str:
    """Page texts joined with newlines; accepts a path or raw PDF bytes."""
    handle = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        with pdfplumber.open(handle) as pdf:
            pages = [page.extract_text() or '' for page in pdf.pages]
    except Exception as e:
        LOG.exception('pdf_text_extraction_failed')
        raise FileProcessingError(f'Error extracting text from PDF: {e}') from e
    text = '\n'.join(pages)
    LOG.info('pdf_text_extracted', extra={'pages': len(pages), 'length': len(text)})
    return text
