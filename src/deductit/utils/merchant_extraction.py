"""Merchant name extraction from free-text transaction descriptions.

One extraction routine serves both the classifier's heuristic tier and the
bulk merchant search; the two differ only in the strategy table passed in.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

AUSTRALIAN_LOCATIONS = (
    "sydney",
    "melbourne",
    "brisbane",
    "perth",
    "adelaide",
    "hobart",
    "darwin",
    "canberra",
    "australia",
    "aus",
    "nsw",
    "vic",
    "qld",
    "wa",
    "sa",
    "nt",
    "act",
    "tas",
)

BANKING_NOISE_WORDS = (
    "payment",
    "purchase",
    "withdrawal",
    "deposit",
    "transfer",
    "fee",
    "charge",
    "atm",
    "pos",
    "eft",
    "eftpos",
    "bpay",
    "direct",
    "debit",
    "credit",
    "card",
    "visa",
    "mastercard",
    "amex",
    "tfr",
)

GENERIC_WORDS = frozenset(
    {
        "card",
        "debit",
        "credit",
        "purchase",
        "payment",
        "transaction",
        "eftpos",
        "transfer",
        "withdrawal",
        "deposit",
        "fee",
        "charge",
        "service",
        "bank",
        "direct",
        "cities",
        "states",
        "to",
        "from",
        *AUSTRALIAN_LOCATIONS,
    }
)

# Characters allowed to survive in an extracted name
_NAME_JUNK = re.compile(r"[^\w\s&\-'.]")
_SPACES = re.compile(r"\s+")


def _alternation(words) -> str:
    return "|".join(re.escape(word) for word in words)


@dataclass(frozen=True)
class ExtractionStrategy:
    """How to pull a merchant name out of a description.

    Attributes:
        name: Label used in logs
        patterns: Regexes tried in order; group 1 of the first acceptable
            match is the merchant name
        substitutions: (regex, replacement) pairs applied to the lowercased
            description before any pattern is tried
        skip_words: Words that are never a merchant name on their own and are
            trimmed from either end of a candidate
        min_length: Shortest acceptable name
    """

    name: str
    patterns: tuple[re.Pattern, ...]
    substitutions: tuple[tuple[re.Pattern, str], ...] = field(default_factory=tuple)
    skip_words: frozenset[str] = frozenset()
    min_length: int = 3


_NAME = r"[a-z][a-z0-9\s&\-'.]{2,}?"
_LOCATION = _alternation(AUSTRALIAN_LOCATIONS)

NOISE_WORD_STRATEGY = ExtractionStrategy(
    name="noise-word",
    substitutions=(
        (re.compile(rf"\b(?:{_alternation(BANKING_NOISE_WORDS)})\b"), " "),
        (re.compile(r"\d+"), " "),
        (re.compile(r"[^\w\s]|_"), " "),
    ),
    patterns=(re.compile(r"(\S+)"),),
)

PREFIX_PATTERN_STRATEGY = ExtractionStrategy(
    name="prefix-pattern",
    patterns=(
        re.compile(rf"(?:debit card purchase|card purchase|purchase)\s+({_NAME})\s+(?:{_LOCATION})\b"),
        re.compile(rf"^eftpos\s+({_NAME})\s+(?:{_LOCATION})\b"),
        re.compile(rf"(?:direct debit|\bdd)\s+({_NAME})(?=\s|$)"),
        re.compile(rf"(?:transfer (?:to|from)|\btfr)\s+({_NAME})(?=\s|$)"),
        re.compile(rf"({_NAME})\s*\*(?:trip|ride|delivery)"),
        re.compile(rf"^({_NAME})\s*[-–]\s+"),
        re.compile(r"(?:^|\s)([a-z][a-z0-9&\-'.]{2,}?)(?=\s|$)"),
    ),
    skip_words=GENERIC_WORDS,
)


def _clean_candidate(candidate: str, skip_words: frozenset[str]) -> str:
    candidate = _SPACES.sub(" ", _NAME_JUNK.sub("", candidate)).strip(" -'.")
    words = candidate.split(" ")
    while words and words[0] in skip_words:
        words.pop(0)
    while words and words[-1] in skip_words:
        words.pop()
    return " ".join(words)


def extract_merchant(description: str, strategy: ExtractionStrategy) -> Optional[str]:
    """Extract a lowercase merchant name guess from a description.

    Args:
        description: Raw transaction description
        strategy: Extraction strategy table

    Returns:
        Merchant name in lowercase, or None when nothing usable remains
    """
    if not description:
        return None

    text = _SPACES.sub(" ", description.lower()).strip()
    for pattern, replacement in strategy.substitutions:
        text = pattern.sub(replacement, text)
    text = _SPACES.sub(" ", text).strip()

    for pattern in strategy.patterns:
        for match in pattern.finditer(text):
            candidate = _clean_candidate(match.group(1), strategy.skip_words)
            if len(candidate) >= strategy.min_length and candidate not in strategy.skip_words:
                return candidate
    return None


def display_name(merchant_name: str) -> str:
    """Title-case a lowercase merchant name for display."""
    return " ".join(word[:1].upper() + word[1:] for word in merchant_name.split())
