from typing import List
import re
from nltk.tokenize.punkt import PunktSentenceTokenizer

# An untrained Punkt model needs no downloaded data and still splits on
# sentence-final punctuation followed by whitespace.
_tokenizer = PunktSentenceTokenizer()

WORD_PATTERN = re.compile(r"\S+")

def split_into_sentences(text: str) -> List[str]:
    """Split text into sentences using NLTK's Punkt tokenizer.

    Args:
        text: Text to split into sentences

    Returns:
        List of non-empty, stripped sentences
    """
    sentences = _tokenizer.tokenize(text)

    # Clean up sentences
    sentences = [s.strip() for s in sentences]
    sentences = [s for s in sentences if s]  # Remove empty sentences

    return sentences

def split_into_words(text: str) -> List[str]:
    """Split text on whitespace."""
    return WORD_PATTERN.findall(text)

def count_words(text: str) -> int:
    return len(split_into_words(text))
