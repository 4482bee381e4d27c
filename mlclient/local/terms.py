"""
Term and item analysis for text and items fields.

Mirrors the tokenization the remote service applies when it builds tag clouds
and item lists, so term counts computed locally match the ones used to train.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any

TM_TOKENS = "tokens_only"
TM_FULL_TERM = "full_terms_only"
TM_ALL = "all"

DEFAULT_ITEM_SEPARATOR = " "

TOKEN_RE = re.compile(r"(\b|_)([^\b_\s]+?)(\b|_)", re.U)
MULTI_TOKEN_RE = re.compile(r"^.+\b.+$", re.U)


def _flags(case_sensitive: bool) -> int:
    return re.U if case_sensitive else re.U | re.I


def parse_terms(text: str | None, case_sensitive: bool = True) -> list[str]:
    """Split text into tokens; lower-cased unless case_sensitive."""
    if text is None:
        return []
    tokens = [match[1] for match in TOKEN_RE.findall(text)]
    return tokens if case_sensitive else [token.lower() for token in tokens]


def item_regexp(item_analysis: dict[str, Any] | None) -> str:
    options = item_analysis or {}
    regexp = options.get("separator_regexp")
    if regexp is None:
        regexp = re.escape(options.get("separator") or DEFAULT_ITEM_SEPARATOR)
    return regexp


def parse_items(text: str | None, item_analysis: dict[str, Any] | None = None) -> list[str]:
    """Split an items value by the field's separator; blanks are dropped."""
    if text is None:
        return []
    items = (item.strip() for item in re.split(item_regexp(item_analysis), text, flags=re.U))
    return [item for item in items if item]


def full_term_match(text: str, full_term: str, case_sensitive: bool) -> int:
    if not case_sensitive:
        text, full_term = text.lower(), full_term.lower()
    return 1 if text == full_term else 0


def term_matches(text: str, forms: list[str], term_analysis: dict[str, Any] | None = None) -> int:
    """
    Count occurrences of a term (given as its list of forms) in text.

    In full_terms_only mode the whole value must equal the term. In 'all' mode a
    single multi-token term is matched as a full term as well.
    """
    options = term_analysis or {}
    token_mode = options.get("token_mode", TM_ALL)
    case_sensitive = options.get("case_sensitive", False)
    first_term = forms[0]
    if token_mode == TM_FULL_TERM:
        return full_term_match(text, first_term, case_sensitive)
    if token_mode == TM_ALL and len(forms) == 1 and MULTI_TOKEN_RE.match(first_term):
        return full_term_match(text, first_term, case_sensitive)
    expression = r"(\b|_)%s(\b|_)" % r"(\b|_)|(\b|_)".join(re.escape(form) for form in forms)
    return len(re.findall(expression, text, flags=_flags(case_sensitive)))


def item_matches(text: str, item: str, item_analysis: dict[str, Any] | None = None) -> int:
    """1 when item is one of the separated values in text, else 0."""
    regexp = item_regexp(item_analysis)
    expression = r"(^|%s)%s($|%s)" % (regexp, re.escape(item), regexp)
    return 1 if re.search(expression, text, flags=re.U) else 0


def text_tokens(text: str, term_analysis: dict[str, Any] | None = None) -> list[str]:
    """Tokens used for coefficient lookup, honoring the field's token mode."""
    options = term_analysis or {}
    token_mode = options.get("token_mode", TM_ALL)
    case_sensitive = options.get("case_sensitive", False)
    full_term = text if case_sensitive else text.lower()
    if token_mode == TM_FULL_TERM:
        return [full_term]
    tokens = parse_terms(text, case_sensitive)
    if token_mode == TM_ALL and full_term not in tokens:
        tokens.append(full_term)
    return tokens


def unique_terms(
    tokens: list[str],
    term_forms: dict[str, list[str]],
    vocabulary: list[str],
) -> list[tuple[str, int]]:
    """
    Map tokens to their canonical vocabulary term and count them.

    Forms listed in term_forms count for their term; tokens outside the
    vocabulary are ignored. Result is sorted by term.
    """
    known = set(vocabulary)
    canonical: dict[str, str] = {}
    for term, forms in term_forms.items():
        for form in forms:
            canonical[form] = term
        canonical[term] = term
    counts: Counter[str] = Counter()
    for token in tokens:
        if token in known:
            counts[token] += 1
        elif canonical.get(token) in known:
            counts[canonical[token]] += 1
    return sorted(counts.items())
