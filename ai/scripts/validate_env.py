import os
import sys
import argparse
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / '.env')

errors = []
warnings = []

parser = argparse.ArgumentParser()
parser.add_argument('--strict', '-s', action='store_true', help='Convert warnings to failures')
parser.add_argument('--ping', action='store_true', help='Call the configured providers and redis')
args = parser.parse_args()
STRICT = args.strict

required = {
    'server': ['ENVIRONMENT', 'HOST', 'PORT'],
}

def check_presence(cat, keys):
    for k in keys:
        if not os.getenv(k):
            errors.append(f"{cat}: Missing {k}")

for cat, keys in required.items():
    check_presence(cat, keys)

try:
    port = int(os.getenv('PORT', '0'))
    if port < 1 or port > 65535:
        errors.append('PORT must be integer between 1 and 65535')
except ValueError:
    errors.append('PORT must be an integer')

groq_key = os.getenv('GROQ_API_KEY', '')
openai_key = os.getenv('OPENAI_API_KEY', '')
if not groq_key and not openai_key:
    errors.append('provider: set GROQ_API_KEY or OPENAI_API_KEY')
if groq_key and not groq_key.startswith('gsk_'):
    warnings.append('GROQ_API_KEY does not start with gsk_; verify provider')
if openai_key and not openai_key.startswith('sk-'):
    warnings.append('OPENAI_API_KEY does not start with sk-; verify provider')

# extraction knobs
if not os.getenv('FLASHCARD_SEPARATOR', '<<<END>>>').strip():
    errors.append('FLASHCARD_SEPARATOR must not be blank')

try:
    limit = int(os.getenv('FLASHCARD_QUESTION_LIMIT', '200'))
    if limit < 1:
        errors.append('FLASHCARD_QUESTION_LIMIT must be >= 1')
except ValueError:
    errors.append('FLASHCARD_QUESTION_LIMIT must be an integer')

max_count = os.getenv('FLASHCARD_MAX_COUNT', '20').strip().lower()
if max_count not in ('', 'none', '0', 'unbounded'):
    try:
        if int(max_count) < 0:
            errors.append('FLASHCARD_MAX_COUNT must be positive, 0 or unbounded')
    except ValueError:
        errors.append('FLASHCARD_MAX_COUNT must be an integer or unbounded')

for name, default, lo, hi in (
    ('MAX_UPLOAD_SIZE_MB', '50', 1, 500),
    ('TEXT_STORE_TTL_SECONDS', '1800', 1, 86400),
    ('TEXT_STORE_SLIDING_TTL_SECONDS', '600', 1, 86400),
    ('GENERATION_TIMEOUT', '60', 1, 600),
):
    try:
        value = int(os.getenv(name, default))
        if value < lo or value > hi:
            errors.append(f'{name} must be between {lo} and {hi}')
    except ValueError:
        errors.append(f'{name} must be an integer')

if int(os.getenv('TEXT_STORE_SLIDING_TTL_SECONDS', '600') or 0) > int(os.getenv('TEXT_STORE_TTL_SECONDS', '1800') or 0):
    warnings.append('TEXT_STORE_SLIDING_TTL_SECONDS exceeds TEXT_STORE_TTL_SECONDS; it will be clipped')

# deck database directory must be writable
db_path = os.getenv('DECK_DB_PATH', 'flashcards.db')
if db_path != ':memory:':
    db_dir = Path(db_path).resolve().parent
    if not db_dir.exists() or not os.access(db_dir, os.W_OK):
        errors.append(f'DECK_DB_PATH directory not writable: {db_dir}')

upload_dir = Path(os.getenv('UPLOAD_DIR', 'uploads'))
try:
    upload_dir.mkdir(parents=True, exist_ok=True)
    if not os.access(upload_dir, os.W_OK):
        errors.append(f'UPLOAD_DIR not writable: {upload_dir}')
except OSError as e:
    errors.append(f'Failed to verify/create upload dir: {e}')

if args.ping:
    from openai import OpenAI

    for name, key, base_url in (
        ('Groq', groq_key, os.getenv('GROQ_BASE_URL', 'https://api.groq.com/openai/v1')),
        ('OpenAI', openai_key, os.getenv('OPENAI_BASE_URL') or None),
    ):
        if not key:
            continue
        try:
            OpenAI(api_key=key, base_url=base_url, max_retries=0).models.list()
            print(f'{name}: API reachable')
        except Exception as e:
            warnings.append(f'{name} check failed: {e}')

    if os.getenv('REDIS_CACHE_ENABLED', 'true').lower() in ('1', 'true', 'yes'):
        import redis
        try:
            r = redis.Redis(host=os.getenv('REDIS_HOST', 'redis'), port=int(os.getenv('REDIS_PORT', '6379')), password=os.getenv('REDIS_PASSWORD') or None, socket_connect_timeout=2)
            if r.ping():
                print('Redis: OK')
        except redis.RedisError as e:
            warnings.append(f'Redis check failed: {e}; text store will use memory')

if errors:
    print('\nENV validation failed:')
    for e in errors:
        print(' -', e)
    sys.exit(1)

if warnings:
    print('\nWarnings:')
    for w in warnings:
        print(' -', w)
    if STRICT:
        print('\nStrict mode enabled: treating warnings as errors')
        sys.exit(1)

print('\nAll critical validations passed')
sys.exit(0)
