import os

GENERATION_MAX_INPUT_CHARS = int(os.getenv('GENERATION_MAX_INPUT_CHARS', '8000'))
TRUNCATION_NOTICE = '\n\n[Content truncated due to length...]'


def build_prompt(text: str, separator: str, max_chars: int = GENERATION_MAX_INPUT_CHARS) -> str:
    """Ask for 10-15 QUESTION/ANSWER cards, one separator after each card."""
    limited = text if len(text) <= max_chars else text[:max_chars] + TRUNCATION_NOTICE
    return (
        'From the following lecture content, generate 10-15 flashcards suitable for oral exam preparation.\n\n'
        f'For each flashcard, format it EXACTLY like this and separate each flashcard with {separator}:\n'
        'QUESTION: [your question here]\n'
        'ANSWER: [your detailed answer here]\n'
        f'{separator}\n\n'
        'Focus on:\n'
        '- Key concepts and definitions\n'
        '- Important facts and relationships\n'
        '- Topics that would be asked in an oral exam\n'
        '- Clear, concise questions\n'
        '- Detailed, comprehensive answers\n\n'
        'Lecture Content:\n'
        f'{limited}\n\n'
        f'Generate the flashcards now and DO NOT add any other commentary. Use {separator} between flashcards only.'
    )
