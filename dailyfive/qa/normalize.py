from __future__ import annotations

import re

from ..data.schemas import RawQuestion
from ..utils.determinism import fnv1a_hex

# Entities the upstream bank is known to emit. Anything else is left as-is.
ENTITIES: dict[str, str] = {
    "&quot;": '"',
    "&#039;": "'",
    "&#39;": "'",
    "&apos;": "'",
    "&amp;": "&",
    "&rsquo;": "’",
    "&lsquo;": "‘",
    "&ldquo;": "“",
    "&rdquo;": "”",
    "&hellip;": "…",
    "&mdash;": "—",
    "&ndash;": "–",
    "&nbsp;": " ",
    "&shy;": "",
    "&eacute;": "é",
    "&Eacute;": "É",
    "&egrave;": "è",
    "&euml;": "ë",
    "&iuml;": "ï",
    "&aacute;": "á",
    "&agrave;": "à",
    "&iacute;": "í",
    "&oacute;": "ó",
    "&uacute;": "ú",
    "&ntilde;": "ñ",
    "&uuml;": "ü",
    "&Uuml;": "Ü",
    "&ouml;": "ö",
    "&Ouml;": "Ö",
    "&auml;": "ä",
    "&ccedil;": "ç",
    "&aring;": "å",
    "&oslash;": "ø",
    "&szlig;": "ß",
}

_ENTITY_RE = re.compile("|".join(re.escape(k) for k in ENTITIES))
_WS_RE = re.compile(r"\s+")


def decode_entities(text: str) -> str:
    """Decode known entities in a single pass (``&amp;quot;`` -> ``&quot;``)."""
    return _ENTITY_RE.sub(lambda m: ENTITIES[m.group(0)], text or "")


def collapse_ws(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def clean_text(text: str) -> str:
    return collapse_ws(decode_entities(text))


def clean_question(q: RawQuestion) -> RawQuestion:
    """Decode and tidy every display field of a raw question."""
    return q._replace(
        question=clean_text(q.question),
        correct_answer=clean_text(q.correct_answer),
        incorrect_answers=tuple(clean_text(a) for a in q.incorrect_answers),
        category=clean_text(q.category or "") or None,
    )


def hash_text(text: str) -> str:
    return collapse_ws(text).lower()


def question_key(text: str, correct_answer: str) -> str:
    """Stable ledger key for a (question, correct answer) pair."""
    return fnv1a_hex(hash_text(text) + "|" + hash_text(correct_answer))


def key_for(q: RawQuestion) -> str:
    return question_key(q.question, q.correct_answer)
