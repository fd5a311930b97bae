import os
import time
import signal
import asyncio
from datetime import datetime, timezone
from typing import Optional, List

from fastapi import FastAPI, File, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from flashdeck.decks import Deck, Flashcard, DeckRepository, DeckRepositoryError, DeckNotFoundError
from flashdeck.extraction import ExtractionPipeline, FlashcardCandidate
from flashdeck.generation import (
    FlashcardGenerator,
    GenerationError,
    GenerationConfigError,
    GenerationAPIError,
    GenerationTimeoutError,
    GenerationRateLimitError,
    configured_providers,
)
from flashdeck.storage import (
    TextStore,
    TextStoreError,
    FileProcessingError,
    FileTooLargeError,
    is_pdf_file,
    is_image_file,
    check_upload_size,
    save_upload,
    extract_text_from_pdf,
)
from flashdeck.utils import get_logger, log_error, log_request, set_request_context

LOG = get_logger()


class Settings(BaseSettings):
    HOST: str = os.getenv('HOST', '0.0.0.0')
    PORT: int = int(os.getenv('PORT', '8000'))
    ENVIRONMENT: str = os.getenv('ENVIRONMENT', 'development')
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    CORS_ORIGIN: str = os.getenv('CORS_ORIGIN', '*')
    REDIS_REQUIRED_FOR_READY: bool = os.getenv('REDIS_REQUIRED_FOR_READY', 'false').lower() in ('1', 'true', 'yes')
    PROVIDER_REQUIRED_FOR_READY: bool = os.getenv('PROVIDER_REQUIRED_FOR_READY', 'false').lower() in ('1', 'true', 'yes')


settings = Settings()

app = FastAPI(title='Flashdeck AI Service', version='1.0.0', description='Lecture-to-flashcard generation and deck storage')

origins = [o.strip() for o in settings.CORS_ORIGIN.split(',') if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def _error(status_code: int, error: str, details: str, request_id: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'success': False, 'error': error, 'details': details, 'request_id': request_id})


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', None) or os.urandom(8).hex()


@app.middleware('http')
async def add_request_id_and_logging(request: Request, call_next):
    # prefer incoming X-Request-ID header for cross-service tracing
    request_id = request.headers.get('x-request-id') or os.urandom(8).hex()
    request.state.request_id = request_id
    set_request_context(request_id)
    start = time.time()
    LOG.info('http_request_start', extra={'method': request.method, 'path': request.url.path, 'request_id': request_id, 'client': request.client.host if request.client else None})
    try:
        response: Response = await call_next(request)
    except Exception as e:
        log_error(e, {'request_id': request_id, 'method': request.method, 'path': request.url.path})
        body = {'success': False, 'error': 'Internal server error', 'details': None, 'request_id': request_id}
        return JSONResponse(status_code=500, content=body, headers={'X-Request-ID': request_id})
    duration = int((time.time() - start) * 1000)
    log_request(request_id, request.method, request.url.path, response.status_code, duration, ip=request.client.host if request.client else None)
    response.headers['X-Request-ID'] = request_id
    return response


@app.get('/health')
async def health():
    return {'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat(), 'service': 'flashdeck'}


def _check_database():
    try:
        DeckRepository.get_instance().ping()
        return 'ok'
    except Exception as e:
        return f'error: {str(e)}'


def _check_redis():
    try:
        store = TextStore.get_instance()
        return 'ok' if store.backend == 'redis' else 'warn: using in-memory text store'
    except Exception as e:
        return f'error: {str(e)}'


def _check_provider():
    providers = configured_providers()
    if not providers:
        return 'error: no provider key' if settings.PROVIDER_REQUIRED_FOR_READY else 'warn: no provider key'
    return 'ok: ' + ','.join(p.name for p in providers)


@app.get('/ready')
async def ready():
    services = {
        'database': await asyncio.to_thread(_check_database),
        'redis': _check_redis(),
        'provider': _check_provider(),
    }
    ready_ok = True
    if services['database'].startswith('error'):
        ready_ok = False
    if settings.REDIS_REQUIRED_FOR_READY and not services['redis'].startswith('ok'):
        ready_ok = False
    if services['provider'].startswith('error'):
        ready_ok = False
    status_code = 200 if ready_ok else 503
    return JSONResponse(status_code=status_code, content={'status': 'ready' if ready_ok else 'not ready', 'services': services})


# Decks

class CreateDeckRequest(BaseModel):
    name: str
    description: Optional[str] = None


class CreateFlashcardRequest(BaseModel):
    question: str
    answer: str


@app.get('/decks', response_model=List[Deck])
async def list_decks(fastapi_request: Request):
    try:
        return await asyncio.to_thread(DeckRepository.get_instance().list_decks)
    except DeckRepositoryError as e:
        LOG.exception('list_decks_failed')
        return _error(500, 'An error occurred while retrieving decks', str(e), _request_id(fastapi_request))


@app.get('/decks/{deck_id}', response_model=Deck)
async def get_deck(deck_id: int, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    try:
        deck = await asyncio.to_thread(DeckRepository.get_instance().get_deck, deck_id)
    except DeckRepositoryError as e:
        LOG.exception('get_deck_failed', extra={'deck_id': deck_id})
        return _error(500, 'An error occurred while retrieving the deck', str(e), request_id)
    if deck is None:
        return _error(404, 'Not found', f'Deck with ID {deck_id} not found', request_id)
    return deck


@app.post('/decks', response_model=Deck, status_code=201)
async def create_deck(req: CreateDeckRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    if not req.name or not req.name.strip():
        return _error(400, 'Invalid request', 'Deck name is required', request_id)
    try:
        return await asyncio.to_thread(DeckRepository.get_instance().create_deck, req.name, req.description)
    except DeckRepositoryError as e:
        LOG.exception('create_deck_failed')
        return _error(500, 'An error occurred while creating the deck', str(e), request_id)


@app.get('/decks/{deck_id}/flashcards', response_model=List[Flashcard])
async def list_deck_flashcards(deck_id: int, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    try:
        return await asyncio.to_thread(DeckRepository.get_instance().list_flashcards, deck_id)
    except DeckNotFoundError as e:
        return _error(404, 'Not found', str(e), request_id)
    except DeckRepositoryError as e:
        LOG.exception('list_flashcards_failed', extra={'deck_id': deck_id})
        return _error(500, 'An error occurred while retrieving flashcards', str(e), request_id)


@app.post('/decks/{deck_id}/flashcards', response_model=Flashcard, status_code=201)
async def create_deck_flashcard(deck_id: int, req: CreateFlashcardRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    if not req.question.strip():
        return _error(400, 'Invalid request', 'Question is required', request_id)
    if not req.answer.strip():
        return _error(400, 'Invalid request', 'Answer is required', request_id)
    try:
        return await asyncio.to_thread(DeckRepository.get_instance().create_flashcard, deck_id, req.question, req.answer)
    except DeckNotFoundError as e:
        return _error(404, 'Not found', str(e), request_id)
    except DeckRepositoryError as e:
        LOG.exception('create_flashcard_failed', extra={'deck_id': deck_id})
        return _error(500, 'An error occurred while creating the flashcard', str(e), request_id)


# Text storage

class StoreTextRequest(BaseModel):
    text: str


class StoreTextResponse(BaseModel):
    token: str


class RetrieveTextResponse(BaseModel):
    text: str


@app.post('/text-storage/store', response_model=StoreTextResponse)
async def store_text(req: StoreTextRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    if not req.text or not req.text.strip():
        return _error(400, 'Invalid request', 'Text content is required', request_id)
    try:
        token = TextStore.get_instance().store(req.text)
    except TextStoreError as e:
        return _error(500, 'An error occurred while storing text', str(e), request_id)
    return StoreTextResponse(token=token)


@app.get('/text-storage/retrieve/{token}', response_model=RetrieveTextResponse)
async def retrieve_text(token: str, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    try:
        text = TextStore.get_instance().retrieve(token)
    except TextStoreError as e:
        return _error(500, 'An error occurred while retrieving text', str(e), request_id)
    if text is None:
        return _error(404, 'Not found', 'Text content not found or expired. Please upload your slides again.', request_id)
    return RetrieveTextResponse(text=text)


# File upload

class UploadResponse(BaseModel):
    success: bool
    token: str
    filename: str
    text_length: int
    request_id: str


@app.post('/files/upload', response_model=UploadResponse)
async def upload_file(fastapi_request: Request, file: UploadFile = File(...)):
    request_id = _request_id(fastapi_request)
    filename = file.filename or ''
    if is_image_file(filename):
        return _error(415, 'Unsupported file type', 'Image uploads are not supported; upload a PDF', request_id)
    if not is_pdf_file(filename):
        return _error(415, 'Unsupported file type', 'Only PDF files are supported', request_id)
    data = await file.read()
    try:
        check_upload_size(len(data))
        path = await asyncio.to_thread(save_upload, data, filename)
        text = await asyncio.to_thread(extract_text_from_pdf, path)
    except FileTooLargeError as e:
        LOG.warning('upload_too_large', extra={'request_id': request_id, 'upload_name': filename, 'size': len(data)})
        return _error(413, 'File too large', str(e), request_id)
    except FileProcessingError as e:
        LOG.warning('upload_processing_failed', extra={'request_id': request_id, 'upload_name': filename, 'error': str(e)})
        return _error(422, 'File processing failed', str(e), request_id)
    if not text.strip():
        return _error(422, 'File processing failed', 'No text could be extracted from the PDF', request_id)
    try:
        token = TextStore.get_instance().store(text)
    except TextStoreError as e:
        return _error(500, 'An error occurred while storing text', str(e), request_id)
    LOG.info('upload_processed', extra={'request_id': request_id, 'upload_name': filename, 'text_length': len(text)})
    return UploadResponse(success=True, token=token, filename=filename, text_length=len(text), request_id=request_id)


# Flashcards

class FlashcardGenerateRequest(BaseModel):
    text: Optional[str] = Field(None, description='Lecture text to generate from')
    token: Optional[str] = Field(None, description='Text storage token (alternative to text)')
    deck_id: Optional[int] = Field(None, description='Persist generated cards into this deck')


class FlashcardGenerateResponse(BaseModel):
    success: bool
    flashcards: List[FlashcardCandidate]
    saved: Optional[List[Flashcard]] = None
    metadata: dict
    request_id: str


class FlashcardExtractRequest(BaseModel):
    response_text: str


class FlashcardExtractResponse(BaseModel):
    success: bool
    flashcards: List[FlashcardCandidate]
    metadata: dict
    request_id: str


@app.post('/flashcards/generate', response_model=FlashcardGenerateResponse)
async def generate_flashcards_endpoint(req: FlashcardGenerateRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    text = req.text
    if not (text and text.strip()) and req.token:
        try:
            text = TextStore.get_instance().retrieve(req.token)
        except TextStoreError as e:
            return _error(500, 'An error occurred while retrieving text', str(e), request_id)
        if text is None:
            return _error(404, 'Not found', 'Text content not found or expired. Please upload your slides again.', request_id)
    if not text or not text.strip():
        return _error(400, 'Invalid request', 'Either text or token is required', request_id)

    repo = None
    if req.deck_id is not None:
        repo = DeckRepository.get_instance()
        if await asyncio.to_thread(repo.get_deck, req.deck_id) is None:
            return _error(404, 'Not found', f'Deck with ID {req.deck_id} not found', request_id)

    LOG.info('flashcard_generation_start', extra={'request_id': request_id, 'text_length': len(text), 'deck_id': req.deck_id})
    start = time.time()
    try:
        generator = FlashcardGenerator.get_instance()
        result = await asyncio.to_thread(generator.generate, text, request_id)
        saved = None
        if repo is not None and result.flashcards:
            saved = await asyncio.to_thread(repo.create_flashcards, req.deck_id, result.flashcards)
        duration_ms = int((time.time() - start) * 1000)
        metadata = dict(result.metadata)
        metadata.update({'processing_time_ms': duration_ms, 'strategy': result.strategy, 'provider': result.provider, 'model_used': result.model})
        LOG.info('flashcard_generation_complete', extra={'request_id': request_id, 'count': len(result.flashcards), 'saved': len(saved or []), 'duration_ms': duration_ms})
        return FlashcardGenerateResponse(success=True, flashcards=result.flashcards, saved=saved, metadata=metadata, request_id=request_id)
    except GenerationConfigError as e:
        LOG.exception('flashcard_provider_not_configured')
        return _error(503, 'Generation provider not configured', str(e), request_id)
    except GenerationRateLimitError as e:
        LOG.exception('flashcard_rate_limited')
        return _error(429, 'LLM rate limit exceeded', str(e), request_id)
    except GenerationTimeoutError as e:
        LOG.exception('flashcard_timeout')
        return _error(504, 'LLM timeout', str(e), request_id)
    except GenerationAPIError as e:
        LOG.exception('flashcard_api_error')
        return _error(502, 'LLM API error', str(e), request_id)
    except GenerationError as e:
        LOG.exception('flashcard_generation_failed')
        return _error(500, 'Flashcard generation failed', str(e), request_id)
    except DeckRepositoryError as e:
        LOG.exception('flashcard_save_failed')
        return _error(500, 'Could not save flashcards', str(e), request_id)


@app.post('/flashcards/extract', response_model=FlashcardExtractResponse)
async def extract_flashcards_endpoint(req: FlashcardExtractRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    result = ExtractionPipeline().extract(req.response_text)
    metadata = {'strategy': result.strategy.value, 'total_found': result.total_found, 'truncated': result.truncated, 'flashcard_count': len(result.flashcards)}
    return FlashcardExtractResponse(success=True, flashcards=result.flashcards, metadata=metadata, request_id=request_id)


@app.on_event('startup')
async def on_startup():
    LOG.info('Flashdeck service starting', extra={'env': settings.ENVIRONMENT})
    try:
        DeckRepository.get_instance()
        LOG.info('DeckRepository ready')
    except Exception:
        LOG.exception('deck_repository_init_failed')
    try:
        TextStore.get_instance()
        LOG.info('TextStore ready')
    except Exception:
        LOG.exception('text_store_init_failed')
    # warm FlashcardGenerator (non-blocking)
    try:
        FlashcardGenerator.get_instance()
        LOG.info('FlashcardGenerator warmup triggered')
    except GenerationError as e:
        LOG.warning('FlashcardGenerator warmup failed', extra={'error': str(e)})


@app.on_event('shutdown')
async def on_shutdown():
    LOG.info('Flashdeck service shutting down')
    if DeckRepository._instance is not None:
        DeckRepository._instance.close()
        LOG.info('DeckRepository closed')


def _install_signal_handlers(loop: Optional[asyncio.AbstractEventLoop] = None):
    if loop is None:
        loop = asyncio.get_event_loop()

    def _handler(signum, frame):
        LOG.info('Received shutdown signal', extra={'signal': signum})
        loop.call_soon_threadsafe(loop.stop)

    signal.signal(signal.SIGTERM, _handler)
    signal.signal(signal.SIGINT, _handler)


if __name__ == '__main__':
    import uvicorn

    _install_signal_handlers()
    workers = int(os.getenv('WORKERS', '1'))
    # uvicorn does not support reload with multiple workers
    if settings.ENVIRONMENT == 'development':
        workers = 1
    reload_enabled = (settings.ENVIRONMENT == 'development') and (workers == 1)

    uvicorn.run(
        'main:app',
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=reload_enabled,
        workers=workers,
    )
