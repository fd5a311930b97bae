from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import openai
from openai import OpenAI
from pydantic import BaseModel, Field

from flashdeck.extraction import ExtractionConfig, ExtractionPipeline, FlashcardCandidate
from flashdeck.utils import get_logger, log_llm_call, log_flashcard_generation

from .prompts import build_prompt

LOG = get_logger()


class GenerationError(Exception):
    pass


class GenerationConfigError(GenerationError):
    pass


class GenerationAPIError(GenerationError):
    pass


class GenerationTimeoutError(GenerationError):
    pass


class GenerationRateLimitError(GenerationAPIError):
    pass


class GenerationResult(BaseModel):
    flashcards: List[FlashcardCandidate]
    strategy: str
    provider: str
    model: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


# Config
GROQ_BASE_URL = os.getenv('GROQ_BASE_URL', 'https://api.groq.com/openai/v1')
GROQ_MODEL = os.getenv('GROQ_MODEL', 'llama-3.1-8b-instant')
OPENAI_BASE_URL = os.getenv('OPENAI_BASE_URL') or None
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
GENERATION_TEMPERATURE = float(os.getenv('GENERATION_TEMPERATURE', '0.7'))
GENERATION_MAX_TOKENS = int(os.getenv('GENERATION_MAX_TOKENS', '4000'))
GENERATION_TIMEOUT = int(os.getenv('GENERATION_TIMEOUT', '60'))


@dataclass
class ProviderSettings:
    name: str
    api_key: str
    model: str
    base_url: Optional[str] = None


def configured_providers() -> List[ProviderSettings]:
    """Providers in call order: Groq first, OpenAI as fallback."""
    providers: List[ProviderSettings] = []
    groq_key = os.getenv('GROQ_API_KEY')
    if groq_key:
        providers.append(ProviderSettings('groq', groq_key, GROQ_MODEL, GROQ_BASE_URL))
    openai_key = os.getenv('OPENAI_API_KEY')
    if openai_key:
        providers.append(ProviderSettings('openai', openai_key, OPENAI_MODEL, OPENAI_BASE_URL))
    return providers


class FlashcardGenerator:
    _instance = None

    def __init__(self, providers: Optional[List[ProviderSettings]] = None, extraction_config: Optional[ExtractionConfig] = None):
        self.providers = providers if providers is not None else configured_providers()
        if not self.providers:
            raise GenerationConfigError('No generation provider configured (set GROQ_API_KEY or OPENAI_API_KEY)')
        self.extraction_config = extraction_config or ExtractionConfig()
        self.pipeline = ExtractionPipeline(self.extraction_config)
        # one attempt per provider; failures move on to the next provider
        self._clients = {
            p.name: OpenAI(api_key=p.api_key, base_url=p.base_url, timeout=GENERATION_TIMEOUT, max_retries=0)
            for p in self.providers
        }
        LOG.info('FlashcardGenerator initialized', extra={'providers': [p.name for p in self.providers]})

    @classmethod
    def get_instance(cls) -> 'FlashcardGenerator':
        if cls._instance is None:
            cls._instance = FlashcardGenerator()
        return cls._instance

    def _call_provider(self, provider: ProviderSettings, prompt: str, request_id: Optional[str] = None) -> str:
        client = self._clients[provider.name]
        start = time.time()
        try:
            resp = client.chat.completions.create(
                model=provider.model,
                messages=[{'role': 'user', 'content': prompt}],
                temperature=GENERATION_TEMPERATURE,
                max_tokens=GENERATION_MAX_TOKENS,
                top_p=1,
                stream=False,
            )
        except openai.APITimeoutError as e:
            LOG.exception('generation_timeout', extra={'provider': provider.name})
            raise GenerationTimeoutError(f'{provider.name} request timed out: {e}') from e
        except openai.RateLimitError as e:
            LOG.exception('generation_rate_limited', extra={'provider': provider.name})
            raise GenerationRateLimitError(f'{provider.name} rate limit exceeded. Please wait and try again later.') from e
        except openai.APIError as e:
            LOG.exception('generation_api_error', extra={'provider': provider.name})
            raise GenerationAPIError(f'{provider.name} generation failed: {e}') from e

        duration_ms = int((time.time() - start) * 1000)
        usage = getattr(resp, 'usage', None)
        log_llm_call(
            request_id or '',
            provider.name,
            provider.model,
            getattr(usage, 'prompt_tokens', 0) or 0,
            getattr(usage, 'completion_tokens', 0) or 0,
            duration_ms,
        )
        choices = getattr(resp, 'choices', None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise GenerationAPIError(f'No response from {provider.name}')
        LOG.debug('generation_raw_response', extra={'provider': provider.name, 'response_length': len(content)})
        return content

    def _complete(self, prompt: str, request_id: Optional[str] = None) -> Tuple[str, ProviderSettings]:
        last_error: Optional[GenerationError] = None
        for provider in self.providers:
            try:
                return self._call_provider(provider, prompt, request_id=request_id), provider
            except GenerationError as e:
                LOG.warning('generation_provider_failed', extra={'provider': provider.name, 'error': str(e)})
                last_error = e
        raise last_error

    def generate(self, text: str, request_id: Optional[str] = None) -> GenerationResult:
        if not text or not text.strip():
            raise GenerationError('Empty text')
        start = time.time()
        prompt = build_prompt(text, self.extraction_config.separator)
        raw, provider = self._complete(prompt, request_id=request_id)
        extracted = self.pipeline.extract(raw)
        duration_ms = int((time.time() - start) * 1000)
        log_flashcard_generation(request_id or '', len(extracted.flashcards), extracted.strategy.value, provider.name, duration_ms)
        metadata = {
            'processing_time_ms': duration_ms,
            'flashcard_count': len(extracted.flashcards),
            'total_found': extracted.total_found,
            'truncated': extracted.truncated,
            'input_length': len(text),
        }
        return GenerationResult(
            flashcards=extracted.flashcards,
            strategy=extracted.strategy.value,
            provider=provider.name,
            model=provider.model,
            metadata=metadata,
        )


def generate_flashcards(text: str, request_id: Optional[str] = None) -> Dict[str, Any]:
    gen = FlashcardGenerator.get_instance()
    resp = gen.generate(text, request_id=request_id)
    return resp.model_dump()
