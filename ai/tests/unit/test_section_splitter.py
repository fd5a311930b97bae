from flashdeck.extraction import extract_block, extract_by_separator, split_sections

from tests.fixtures.sample_data import PREAMBLE_RESPONSE, SEPARATOR, WELL_FORMED_RESPONSE


def test_split_sections_requires_separator():
    assert split_sections('QUESTION: x\nANSWER: y', SEPARATOR) == []


def test_split_sections_drops_blank_segments():
    sections = split_sections(f'a{SEPARATOR}\n\n{SEPARATOR}b{SEPARATOR}', SEPARATOR)
    assert sections == ['a', 'b']


def test_single_block():
    cards = extract_by_separator(f'QUESTION: What is X?\nANSWER: X is Y.\n{SEPARATOR}', SEPARATOR, 200)
    assert len(cards) == 1
    assert cards[0].question == 'What is X?'
    assert cards[0].answer == 'X is Y.'


def test_two_blocks_in_order():
    cards = extract_by_separator(WELL_FORMED_RESPONSE, SEPARATOR, 200)
    assert [c.question for c in cards] == ['What is photosynthesis?', 'Where does the Calvin cycle take place?']


def test_preamble_ignored_and_multiline_answer():
    cards = extract_by_separator(PREAMBLE_RESPONSE, SEPARATOR, 200)
    assert len(cards) == 2
    assert cards[0].question == 'What does ATP stand for?'
    assert cards[1].answer == 'Glycolysis\nKrebs cycle\nElectron transport chain'


def test_answer_spanning_lines_after_empty_marker():
    block = 'QUESTION: List three primes\nANSWER:\n2\n3\n5\n'
    card = extract_block(block, 200)
    assert card.answer == '2\n3\n5'


def test_malformed_block_discarded_others_kept():
    text = (
        f'QUESTION: Only a question\n{SEPARATOR}\n'
        f'ANSWER: Only an answer\n{SEPARATOR}\n'
        f'QUESTION: Good?\nANSWER: Yes.\n{SEPARATOR}'
    )
    cards = extract_by_separator(text, SEPARATOR, 200)
    assert len(cards) == 1
    assert cards[0].question == 'Good?'


def test_question_continuation_stops_at_limit():
    block = 'Q: short question\ncontinued here\nand beyond the limit now\nstill more\nA: done'
    card = extract_block(block, 30)
    assert card.question == 'short question continued here and beyond the limit now'
    assert card.answer == 'still more\ndone'


def test_second_question_marker_is_plain_text():
    block = 'QUESTION: First?\nANSWER: One\nQUESTION: Second?'
    card = extract_block(block, 200)
    assert card.question == 'First?'
    assert card.answer == 'One\nQUESTION: Second?'


def test_empty_question_marker_takes_next_line():
    block = 'QUESTION:\nWhat is the powerhouse of the cell?\nANSWER: Mitochondria'
    card = extract_block(block, 200)
    assert card.question == 'What is the powerhouse of the cell?'
    assert card.answer == 'Mitochondria'
