"""Density-based pruning filter.

Scores every element by how much of it is text rather than markup, how
little of that text is link text, how valuable its tag usually is, and how
much text it holds. Elements scoring under the threshold are removed along
with their subtree.
"""

from __future__ import annotations

import math

from bs4.element import Tag

from htmldistill.dom import (
    byte_length,
    detach,
    find_body,
    parse_html,
    remove_comments,
    serialize,
    serialize_children,
)
from htmldistill.filters.config import PruningConfig
from htmldistill.logger import logger
from htmldistill.timing import timeit

DEFAULT_TAG_WEIGHT = 0.5

# Relative weights of the four signals; they always all apply, so their sum
# is a constant normalizer.
_W_TEXT_DENSITY = 0.4
_W_LINK_DENSITY = 0.2
_W_TAG_WEIGHT = 0.2
_W_TEXT_LENGTH = 0.1
_TOTAL_WEIGHT = _W_TEXT_DENSITY + _W_LINK_DENSITY + _W_TAG_WEIGHT + _W_TEXT_LENGTH


class PruningContentFilter:
    """Removes low-value subtrees from an HTML document.

    Excluded tags (navigation, footers, scripts, ...) are always removed,
    whatever they would score. An element scoring exactly the threshold is
    kept.
    """

    def __init__(self, config: PruningConfig | None = None) -> None:
        """Initialize the pruning filter.

        Args:
            config: Pruning settings; defaults apply when omitted.

        """
        self._config = config or PruningConfig()

    @property
    def config(self) -> PruningConfig:
        return self._config

    @timeit("Pruning filter")
    def apply(self, html: str) -> str:
        """Prune the document and return the surviving markup.

        Args:
            html: HTML document to prune.

        Returns:
            Serialized children of ``<body>`` (or the whole document when it
            is empty) after pruning.

        """
        soup = parse_html(html)

        removed_comments = remove_comments(soup)
        removed_tags = self._remove_excluded_tags(soup)
        logger.debug(
            "[PRUNING STARTED] removed %d comments and %d excluded elements",
            removed_comments,
            removed_tags,
        )

        body = soup.find("body")
        self._prune(find_body(soup))

        if isinstance(body, Tag):
            return serialize_children(body)
        return serialize(soup)

    def _remove_excluded_tags(self, soup: Tag) -> int:
        if not self._config.excluded_tags:
            return 0
        excluded = soup.find_all(list(self._config.excluded_tags))
        for element in excluded:
            detach(element)
        return len(excluded)

    def _prune(self, root: Tag) -> None:
        # Pre-order over snapshots of each child list. A node's metrics depend
        # only on its own subtree, so visiting order does not change results.
        pending = [root]
        while pending:
            node = pending.pop()
            for child in list(node.children):
                if not isinstance(child, Tag):
                    continue
                if self._should_remove(child):
                    detach(child)
                else:
                    pending.append(child)

    def _should_remove(self, element: Tag) -> bool:
        text = element.get_text()
        text_len = byte_length(text.strip())

        min_words = self._config.min_word_threshold
        if min_words is not None and len(text.split()) < min_words:
            return True

        score = self.compute_score(
            element.name,
            text_len=text_len,
            tag_len=byte_length(serialize(element)),
            link_text_len=self._link_text_length(element),
        )
        return score < self._config.threshold

    @staticmethod
    def _link_text_length(element: Tag) -> int:
        return sum(byte_length(link.get_text().strip()) for link in element.find_all("a"))

    def compute_score(
        self, tag_name: str, *, text_len: int, tag_len: int, link_text_len: int
    ) -> float:
        """Weighted mean of text density, link density, tag weight and text length.

        Args:
            tag_name: Element name, used to look up its tag weight.
            text_len: Byte length of the element's trimmed text.
            tag_len: Byte length of the element's serialized markup.
            link_text_len: Summed byte length of the trimmed text of its links.

        Returns:
            The element's score; higher means more likely to be content.

        """
        density = text_len / tag_len if tag_len > 0 else 0.0
        link_density = 1.0 - link_text_len / text_len if text_len > 0 else 0.0
        tag_score = self._config.tag_weights.get(tag_name, DEFAULT_TAG_WEIGHT)
        length_score = math.log(text_len + 1)

        score = (
            _W_TEXT_DENSITY * density
            + _W_LINK_DENSITY * link_density
            + _W_TAG_WEIGHT * tag_score
            + _W_TEXT_LENGTH * length_score
        )
        return score / _TOTAL_WEIGHT
