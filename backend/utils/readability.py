from utils.sentence_processing import split_into_words

MIN_SCORE = 0.5
MAX_SCORE = 1.0

def calculate_readability(text: str) -> float:
    """Score how easy a piece of text is to read, between 0.5 and 1.0.

    Shorter average word length scores higher; an average of five characters
    per word maps to 0.7.
    """
    words = split_into_words(text)
    if not words:
        return MIN_SCORE
    avg_word_length = sum(len(word) for word in words) / len(words)
    score = 0.7 + (5 - avg_word_length) / 10
    return round(min(MAX_SCORE, max(MIN_SCORE, score)), 4)
