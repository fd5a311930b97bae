import pathlib
from types import SimpleNamespace

import pytest

import flashdeck.storage.file_processor as fp_mod
from flashdeck.storage import (
    FileProcessingError,
    FileTooLargeError,
    check_upload_size,
    extract_text_from_pdf,
    is_image_file,
    is_pdf_file,
    save_upload,
)

from tests.fixtures.sample_data import minimal_pdf


class FakePdf:
    def __init__(self, pages):
        self.pages = [SimpleNamespace(extract_text=lambda text=t: text) for t in pages]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_file_type_checks():
    assert is_pdf_file('Lecture.PDF')
    assert not is_pdf_file('notes.txt')
    assert is_image_file('slide.jpeg')
    assert is_image_file('slide.GIF')
    assert not is_image_file('slides.pdf')
    assert not is_pdf_file(None)


def test_check_upload_size():
    check_upload_size(fp_mod.MAX_UPLOAD_SIZE_BYTES)
    with pytest.raises(FileTooLargeError):
        check_upload_size(fp_mod.MAX_UPLOAD_SIZE_BYTES + 1)
    assert issubclass(FileTooLargeError, FileProcessingError)


def test_save_upload_prefixes_name(tmp_path):
    path = pathlib.Path(save_upload(b'%PDF-1.4', '../../etc/lecture.pdf', upload_dir=str(tmp_path)))
    assert path.parent == tmp_path
    assert path.name.endswith('_lecture.pdf')
    assert path.read_bytes() == b'%PDF-1.4'


def test_extract_text_joins_pages(monkeypatch):
    opened = []

    def fake_open(source):
        opened.append(source)
        return FakePdf(['Page one', None, 'Page three'])

    monkeypatch.setattr(fp_mod.pdfplumber, 'open', fake_open)
    assert extract_text_from_pdf('/tmp/slides.pdf') == 'Page one\n\nPage three'
    assert opened == ['/tmp/slides.pdf']


def test_extract_text_accepts_bytes(monkeypatch):
    seen = {}

    def fake_open(source):
        seen['data'] = source.read()
        return FakePdf(['only page'])

    monkeypatch.setattr(fp_mod.pdfplumber, 'open', fake_open)
    assert extract_text_from_pdf(b'%PDF-bytes') == 'only page'
    assert seen['data'] == b'%PDF-bytes'


def test_unreadable_pdf_raises(monkeypatch):
    def broken_open(source):
        raise ValueError('not a pdf')

    monkeypatch.setattr(fp_mod.pdfplumber, 'open', broken_open)
    with pytest.raises(FileProcessingError):
        extract_text_from_pdf(b'garbage')


def test_extract_text_from_real_pdf(tmp_path):
    pdf_bytes = minimal_pdf('Mitochondria make ATP')
    path = tmp_path / 'slides.pdf'
    path.write_bytes(pdf_bytes)
    assert extract_text_from_pdf(str(path)).strip() == 'Mitochondria make ATP'
    assert extract_text_from_pdf(pdf_bytes).strip() == 'Mitochondria make ATP'
