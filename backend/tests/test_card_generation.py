import pytest

from utils.card_generation import get_card_generator
from utils.card_generation.base import truncate
from utils.card_generation.heuristic import HeuristicCardGenerator
from utils.card_generation.llm import OpenRouterCardGenerator
from utils.errors import ExternalAuthenticationError
from utils.readability import calculate_readability
from utils.sentence_processing import split_into_sentences, count_words

def test_split_into_sentences():
    text = "First sentence here. Second one follows! Is this the third? Yes."
    assert split_into_sentences(text) == [
        "First sentence here.",
        "Second one follows!",
        "Is this the third?",
        "Yes.",
    ]

def test_count_words():
    assert count_words("one  two\nthree") == 3
    assert count_words("") == 0

def test_readability_bounds():
    assert calculate_readability("a b c d") == 1.0
    assert calculate_readability("incomprehensibilities antidisestablishmentarianism") == 0.5
    assert calculate_readability("") == 0.5

def test_readability_average_word_length():
    # Five letter words score exactly 0.7
    assert calculate_readability("house mouse horse") == pytest.approx(0.7)

def test_heuristic_generates_question_answer_pairs(sample_text):
    drafts = HeuristicCardGenerator().generate(sample_text, 5)
    assert len(drafts) == 5
    assert drafts[0].front_content == "What is Photosynthesis?"
    assert drafts[0].back_content == "Plants capture sunlight using chlorophyll in their leaves."
    assert drafts[1].front_content == "Why is Mitochondria important?"
    assert all(0.5 <= d.readability_score <= 1.0 for d in drafts)

def test_heuristic_limited_by_sentences(sample_text):
    assert len(HeuristicCardGenerator().generate(sample_text, 50)) == 5
    assert len(HeuristicCardGenerator().generate(sample_text, 2)) == 2

def test_heuristic_ignores_short_sentences():
    text = "Short. Tiny one. Cells are the basic unit of life. Every organism is made of cells."
    drafts = HeuristicCardGenerator().generate(text, 5)
    assert len(drafts) == 1
    assert drafts[0].back_content == "Every organism is made of cells."

def test_truncate():
    assert truncate("  short  ", 10) == "short"
    assert truncate("x" * 300, 200) == "x" * 197 + "..."

def test_get_card_generator_default():
    assert isinstance(get_card_generator("heuristic"), HeuristicCardGenerator)

def test_get_card_generator_openrouter_requires_key(monkeypatch):
    from config.env import settings
    monkeypatch.setattr(settings.openrouter, "api_key", None)
    with pytest.raises(ExternalAuthenticationError):
        get_card_generator("openrouter")

def test_get_card_generator_openrouter(monkeypatch):
    from config.env import settings
    monkeypatch.setattr(settings.openrouter, "api_key", "test-key")
    generator = get_card_generator("openrouter")
    assert isinstance(generator, OpenRouterCardGenerator)
    assert generator.name == f"openrouter/{settings.openrouter.model}"

def test_get_card_generator_unknown_backend():
    with pytest.raises(ValueError):
        get_card_generator("magic")
