"""Ephemeral text storage and uploaded file handling"""

from .text_store import TextStore, TextStoreError
from .file_processor import (
	FileProcessingError,
	FileTooLargeError,
	is_pdf_file,
	is_image_file,
	check_upload_size,
	save_upload,
	extract_text_from_pdf,
)

__all__ = [
	'TextStore',
	'TextStoreError',
	'FileProcessingError',
	'FileTooLargeError',
	'is_pdf_file',
	'is_image_file',
	'check_upload_size',
	'save_upload',
	'extract_text_from_pdf',
]
