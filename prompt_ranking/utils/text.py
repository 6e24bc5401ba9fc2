"""
Text normalization utilities used by the search stage and the label filters.

Queries and catalog fields go through the same tokenizer so that index terms
and query terms line up.
"""

import re
import unicodedata
from typing import Iterable, List, Optional


# ---------------------------
# Tokenization
# ---------------------------

# Anything except word characters, whitespace, + and # separates tokens
# (keeps c++, c#, 1+1; turns node.js into node js and code-review into code review).
SEPARATOR_RE = re.compile(r"[^\w\s+#]+")
WHITESPACE_RE = re.compile(r"\s+")
# A token needs at least one word character ("++" and "##" alone are not terms).
WORD_CHAR_RE = re.compile(r"\w")

# Single-character tokens that are meaningful on their own (C and R languages).
ALLOWED_SINGLE_CHARS = frozenset({"c", "r"})

STOPWORDS = frozenset({
    "a", "about", "an", "and", "are", "as", "at", "be", "but", "by", "can",
    "do", "for", "from", "has", "have", "how", "i", "if", "in", "into", "is",
    "it", "its", "me", "my", "not", "of", "on", "or", "our", "so", "that",
    "the", "their", "then", "there", "these", "this", "to", "up", "was",
    "we", "were", "what", "when", "where", "which", "who", "will", "with",
    "you", "your",
})


def normalize_text(text: Optional[str]) -> str:
    """NFKC-normalize and case-fold; None becomes an empty string."""
    if not text:
        return ""
    return unicodedata.normalize("NFKC", str(text)).casefold()


def tokenize_raw(text: Optional[str]) -> List[str]:
    """Lower-cased tokens with punctuation stripped. Stopwords are kept."""
    clean = SEPARATOR_RE.sub(" ", normalize_text(text))
    return [t for t in WHITESPACE_RE.split(clean) if t]


def tokenize(text: Optional[str]) -> List[str]:
    """
    Tokens for indexing and querying: tokenize_raw minus stopwords, single
    characters (except the allowed ones), and tokens with no word character.
    """
    return [
        t for t in tokenize_raw(text)
        if t not in STOPWORDS
        and (len(t) > 1 or t in ALLOWED_SINGLE_CHARS)
        and WORD_CHAR_RE.search(t)
    ]


def tokenize_many(parts: Iterable[Optional[str]]) -> List[str]:
    tokens: List[str] = []
    for part in parts:
        tokens.extend(tokenize(part))
    return tokens


# ---------------------------
# Labels (tags, categories)
# ---------------------------

def normalize_label(label: Optional[str]) -> str:
    """Trimmed, lower-cased tag or category used for comparisons."""
    if not label:
        return ""
    return label.strip().lower()
