"""
Query sanitising, tokenising and match highlighting for lexical search.
"""

import re
from typing import List

_TOKEN_PATTERN = re.compile(r"[a-z0-9_]+")
_QUERY_OPERATORS = re.compile(r"[&|!():*]")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def tokenize(text: str) -> List[str]:
    """Lowercase alphanumeric tokens, dropping single characters other than 'a' and 'i'."""
    if not text:
        return []
    tokens = _TOKEN_PATTERN.findall(text.lower())
    return [t for t in tokens if len(t) > 1 or t in {"a", "i"}]


def query_terms(query: str) -> List[str]:
    """Distinct search terms of a raw user query, in query order.

    Search operator characters are stripped first.
    """
    cleaned = _QUERY_OPERATORS.sub(" ", query or "")
    terms: List[str] = []
    for token in tokenize(cleaned):
        if token not in terms:
            terms.append(token)
    return terms


def highlight_terms(text: str, terms: List[str], start_marker: str = "**", end_marker: str = "**") -> str:
    """Wrap every case-insensitive occurrence of a term in markers."""
    if not terms or not text:
        return text
    # Longest first so "decisions" wins over "decision" at the same offset
    alternation = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    pattern = re.compile(f"({alternation})", re.IGNORECASE)
    return pattern.sub(lambda m: f"{start_marker}{m.group(1)}{end_marker}", text)


def extract_highlights(text: str, terms: List[str], max_length: int = 150, max_snippets: int = 3) -> List[str]:
    """Sentences containing the most distinct terms, best first."""
    if not terms or not text:
        return []

    scored = []
    for position, sentence in enumerate(s for s in _SENTENCE_SPLIT.split(text) if s.strip()):
        lowered = sentence.lower()
        score = sum(1 for term in terms if term in lowered)
        if score > 0:
            scored.append((score, position, sentence.strip()[:max_length]))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [sentence for _, _, sentence in scored[:max_snippets]]


def build_preview(text: str, terms: List[str], max_chars: int = 200) -> str:
    """Excerpt of ``text`` around the first matched term, terms highlighted."""
    if not text:
        return ""

    lowered = text.lower()
    positions = [lowered.find(t) for t in terms]
    positions = [p for p in positions if p >= 0]
    first = min(positions) if positions else 0

    start = max(0, first - max_chars // 4)
    end = min(len(text), start + max_chars)
    start = max(0, end - max_chars)

    excerpt = text[start:end].strip()
    if start > 0:
        excerpt = "..." + excerpt
    if end < len(text):
        excerpt = excerpt + "..."
    return highlight_terms(excerpt, terms)
