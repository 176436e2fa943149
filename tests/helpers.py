"""
Shared test doubles and sample documents.
"""

from types import SimpleNamespace

from parsing.schemas import ParsedElement

VOCAB = [
    "photosynthesis",
    "light",
    "chlorophyll",
    "mitochondria",
    "cell",
    "energy",
    "water",
    "history",
]
TEST_DIM = len(VOCAB)

PAGE_SENTENCES = {
    1: "Photosynthesis uses light and chlorophyll to make sugar in green leaves. ",
    2: "Mitochondria are the powerhouse of the cell and release energy from food. ",
    3: "Water covers most of the planet and has shaped human history for ages. ",
}


def keyword_vector(text: str):
    """Deterministic embedding: keyword counts (never all-zero)."""
    lowered = text.lower()
    return [lowered.count(word) + 0.01 for word in VOCAB]


def embedding_response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def page_text(sentence: str, length: int) -> str:
    """Repeat `sentence` and cut the result to exactly `length` characters."""
    repeated = sentence * (length // len(sentence) + 1)
    return repeated[:length]


def three_page_elements():
    """Pages of 1100 / 900 / 800 characters → 3 + 2 + 2 = 7 chunks at window 500."""
    return [
        ParsedElement(text=page_text(PAGE_SENTENCES[1], 1100), page_number=1),
        ParsedElement(text=page_text(PAGE_SENTENCES[2], 900), page_number=2),
        ParsedElement(text=page_text(PAGE_SENTENCES[3], 800), page_number=3),
    ]
