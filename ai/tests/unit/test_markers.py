from flashdeck.extraction import MARKERS, MarkerKind, find_marker, match_prefix


def test_marker_table_prefers_long_tags():
    tags = [tag for tag, _ in MARKERS]
    assert tags.index('QUESTION:') < tags.index('Q:')
    assert tags.index('ANSWER:') < tags.index('A:')


def test_match_prefix_case_insensitive():
    m = match_prefix('question: What is X?')
    assert m.kind is MarkerKind.QUESTION
    assert m.tag == 'QUESTION:'
    assert m.remainder == 'What is X?'

    m = match_prefix('a:   42  ')
    assert m.kind is MarkerKind.ANSWER
    assert m.remainder == '42'


def test_match_prefix_requires_start_of_line():
    assert match_prefix('The Q: is inline') is None
    assert match_prefix('Notes without markers') is None


def test_find_marker_anywhere_question_first():
    m = find_marker('1) Q: What is Z?')
    assert m.kind is MarkerKind.QUESTION
    assert m.remainder == 'What is Z?'

    # question markers are checked before answer markers
    m = find_marker('A: first then Q: second')
    assert m.kind is MarkerKind.QUESTION
    assert m.remainder == 'second'


def test_find_marker_answer_and_none():
    m = find_marker('ANSWER: Paris')
    assert m.kind is MarkerKind.ANSWER
    assert m.tag == 'ANSWER:'
    assert m.remainder == 'Paris'
    assert find_marker('just some prose here') is None


def test_find_marker_matches_inside_words():
    # "Data:" ends in "a:", so the scanner reads it as an answer marker
    m = find_marker('Data: a table')
    assert m.kind is MarkerKind.ANSWER
    assert m.tag == 'A:'
    assert m.remainder == 'a table'
    # prefix matching used inside separator blocks does not
    assert match_prefix('Data: a table') is None
