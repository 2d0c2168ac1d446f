"""Corpus-wide word frequencies for the word cloud."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable, Iterable

from docwiki.core.indexer import Article
from docwiki.core.slugs import strip_diacritics

logger = logging.getLogger(__name__)

MAX_WORDS = 100
MIN_TOKEN_LENGTH = 3

FENCED_BLOCK = re.compile(r"```.*?(```|\Z)", re.DOTALL)
HTML_CODE_BLOCK = re.compile(r"<(pre|code)\b[^>]*>.*?</\1\s*>", re.DOTALL | re.IGNORECASE)
NON_WORD = re.compile(r"[\W_]+")

# Spanish first, then English, then markdown/office/web jargon
_RAW_STOPWORDS = """
a al algo algun alguna algunas alguno algunos ante antes aqui asi aun aunque
bajo bien cada casi como con contra cual cuales cuando cuanto de del desde
donde dos el ella ellas ello ellos en entre era eran es esa esas ese eso esos
esta estaba estado estan estar estas este esto estos fue fueron ha habia han
hasta hay la las le les lo los mas me mi mientras mis mismo mucho muy nada ni
no nos nosotros nuestra nuestro o otra otras otro otros para pero poco por
porque puede pueden que quien se sea ser si sido sin sino sobre solo son su
sus tambien tan tanto te tiene tienen todo todos tras tu tus un una uno unos
usted ustedes y ya yo cual segun hacer hace cada vez ser etc
about after again all also and any are because been before being between both
but can could did does doing down during each few for from further had has
have having here how into its just more most not now off once only other our
out over own same should some such than that the their them then there these
they this those through too under until very was were what when where which
while who whom why will with would you your
md markdown http https www com html htm pdf doc docx png jpg jpeg gif svg img
src href alt url div span class style nbsp amp quot true false null
"""

STOPWORDS = frozenset(strip_diacritics(word).lower() for word in _RAW_STOPWORDS.split())


def normalize_text(text: str) -> str:
    """Strip code blocks, fold case and diacritics, keep letters and digits."""
    text = FENCED_BLOCK.sub(" ", text)
    text = HTML_CODE_BLOCK.sub(" ", text)
    text = strip_diacritics(text).lower()
    return NON_WORD.sub(" ", text)


def extract_tokens(text: str) -> list[str]:
    """Tokens that count towards the word cloud, in document order."""
    return [
        token
        for token in normalize_text(text).split()
        if len(token) >= MIN_TOKEN_LENGTH and not token.isdigit() and token not in STOPWORDS
    ]


def top_words(counts: Counter, limit: int = MAX_WORDS) -> list[dict[str, int | str]]:
    """Highest counts first; ties keep first-seen order (sorted() is stable)."""
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"word": word, "count": count} for word, count in ranked[:limit]]


def compute_word_cloud(
    articles: Iterable[Article],
    read_markdown: Callable[[Article], str],
    limit: int = MAX_WORDS,
) -> dict[str, object]:
    """Aggregate token counts over every article.

    Articles with an empty body are skipped. Articles whose content cannot be
    resolved are logged and skipped; they never fail the whole computation.

    Returns:
        {"words": [{"word", "count"}, ...], "totalDocs": int}
    """
    counts: Counter = Counter()
    total_docs = 0

    for article in articles:
        try:
            body = read_markdown(article)
        except Exception as e:
            logger.warning(f"Skipping '{article.slug}' in word cloud: {e}")
            continue
        if not body or not body.strip():
            continue
        total_docs += 1
        counts.update(extract_tokens(body))

    return {"words": top_words(counts, limit), "totalDocs": total_docs}
