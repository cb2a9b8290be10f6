"""Query-relevance filter based on BM25 ranking.

Cuts the page body into text chunks, ranks every chunk against a query
(given explicitly or derived from the page's title, first heading and meta
tags), boosts chunks cut at high-signal tags, and keeps those that clear the
threshold, in their original document order.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Callable, Sequence

import snowballstemmer
from bs4 import BeautifulSoup
from bs4.element import Tag

from htmldistill.dom import attribute_value, find_body, parse_html
from htmldistill.exceptions import FilterError
from htmldistill.filters.config import BM25Config
from htmldistill.filters.text_blocks import TextBlockExtractor
from htmldistill.logger import logger
from htmldistill.timing import timeit

K1 = 1.5
B = 0.75

PRIORITY_TAG_WEIGHTS = {
    "h1": 5.0,
    "h2": 4.0,
    "h3": 3.0,
    "title": 4.0,
    "strong": 2.0,
    "b": 1.5,
    "em": 1.5,
    "blockquote": 2.0,
    "code": 2.0,
    "pre": 1.5,
    "th": 1.5,
}

QUERY_FALLBACK_CHARS = 150
SUPPORTED_LANGUAGES = frozenset({"english"})

_TOKEN_BOUNDARY = re.compile(r"[\W_]+")


def bm25_scores(
    corpus: Sequence[Sequence[str]],
    query: Sequence[str],
    *,
    k1: float = K1,
    b: float = B,
) -> list[float]:
    """Score every tokenized document of ``corpus`` against ``query``.

    Query terms count with multiplicity. IDF uses the smoothed
    ``ln((N - df + 0.5) / (df + 0.5) + 1)`` form, so it is never negative.

    Args:
        corpus: Tokenized documents.
        query: Tokenized query.
        k1: Term-frequency saturation.
        b: Document-length normalization.

    Returns:
        One score per document, in corpus order.

    """
    n_docs = len(corpus)
    if n_docs == 0:
        return []

    avg_doc_len = sum(len(doc) for doc in corpus) / n_docs
    scores = [0.0] * n_docs
    if avg_doc_len == 0:
        return scores

    frequencies = [Counter(doc) for doc in corpus]
    for term in query:
        doc_freq = sum(1 for freq in frequencies if term in freq)
        idf = math.log((n_docs - doc_freq + 0.5) / (doc_freq + 0.5) + 1.0)

        for i, (doc, freq) in enumerate(zip(corpus, frequencies, strict=True)):
            term_freq = freq[term]
            if term_freq == 0:
                continue
            norm = 1.0 - b + b * (len(doc) / avg_doc_len)
            scores[i] += idf * (term_freq * (k1 + 1.0)) / (term_freq + k1 * norm)

    return scores


class BM25ContentFilter:
    """Keeps the chunks of a page that are relevant to a query.

    The score only decides whether a chunk is kept; output order is always
    the chunks' document order.
    """

    def __init__(self, config: BM25Config | None = None) -> None:
        """Initialize the BM25 filter.

        Args:
            config: BM25 settings; defaults apply when omitted.

        Raises:
            FilterError: If the configured language has no tokenizer/stemmer.

        """
        self._config = config or BM25Config()
        if self._config.language.lower() not in SUPPORTED_LANGUAGES:
            raise FilterError(f"Unsupported BM25 language: {self._config.language}")
        self._extractor = TextBlockExtractor(min_word_threshold=self._config.min_word_threshold)

    @property
    def config(self) -> BM25Config:
        return self._config

    @timeit("BM25 filter")
    def apply(self, html: str) -> str:
        """Return the relevant chunks of ``html`` as an HTML fragment.

        Args:
            html: HTML document to filter.

        Returns:
            Serialized relevant chunks in document order, or an empty string
            when there is no query, no text, or nothing clears the threshold.

        """
        soup = parse_html(html)
        body = find_body(soup)

        query = self._config.user_query
        if query is None:
            query = self.extract_page_query(soup, body)
        if not query.strip():
            logger.debug("BM25 filter: no query could be resolved")
            return ""

        chunks = self._extractor.extract(body)
        if not chunks:
            return ""

        tokenize = self._tokenizer()
        query_tokens = tokenize(query)
        scores = bm25_scores([tokenize(chunk.text) for chunk in chunks], query_tokens)

        kept = [
            chunk
            for chunk, score in zip(chunks, scores, strict=True)
            if score * PRIORITY_TAG_WEIGHTS.get(chunk.tag_name, 1.0) >= self._config.bm25_threshold
        ]
        kept.sort(key=lambda chunk: chunk.index)

        logger.debug("BM25 filter kept %d of %d chunks", len(kept), len(chunks))
        return "".join(chunk.to_html() for chunk in kept)

    def _tokenizer(self) -> Callable[[str], list[str]]:
        # Snowball stemmers keep per-word state, so each call gets its own.
        stemmer = snowballstemmer.stemmer("english") if self._config.use_stemming else None

        def tokenize(text: str) -> list[str]:
            tokens = [token for token in _TOKEN_BOUNDARY.split(text.lower()) if token]
            if stemmer is not None:
                tokens = stemmer.stemWords(tokens)
            return tokens

        return tokenize

    @staticmethod
    def extract_page_query(soup: BeautifulSoup, body: Tag) -> str:
        """Derive a query from the page itself.

        Uses the title, the first ``<h1>``, and the description/keywords meta
        tags. When none of them has text, falls back to the first paragraph
        longer than 150 characters, truncated to 150 characters.
        """
        parts: list[str] = []

        title = soup.find("title")
        if isinstance(title, Tag):
            parts.append(title.get_text().strip())

        h1 = soup.find("h1")
        if isinstance(h1, Tag):
            parts.append(h1.get_text().strip())

        for meta in soup.find_all("meta"):
            name = (attribute_value(meta, "name") or "").lower()
            if name in ("description", "keywords"):
                parts.append((attribute_value(meta, "content") or "").strip())

        parts = [part for part in parts if part]
        if not parts:
            for paragraph in body.find_all("p"):
                text = paragraph.get_text().strip()
                if len(text) > QUERY_FALLBACK_CHARS:
                    parts.append(text[:QUERY_FALLBACK_CHARS])
                    break

        return " ".join(parts)
