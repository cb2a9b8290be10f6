"""Block/inline text chunking over an HTML subtree.

Walks the tree depth-first and cuts the running text into chunks at the end
of every block-level element. Inline elements never end a chunk, so their
text folds into the nearest enclosing block.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from bs4 import BeautifulSoup
from bs4.element import PageElement, Tag

from htmldistill.dom import is_visible_text, normalized_text

INLINE_TAGS = frozenset({
    "a", "abbr", "acronym", "b", "bdo", "big", "br", "button", "cite", "code",
    "dfn", "em", "i", "img", "input", "kbd", "label", "map", "object", "q",
    "samp", "script", "select", "small", "span", "strong", "sub", "sup",
    "textarea", "time", "tt", "var",
})

HEADER_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "header"})


class TagType(StrEnum):
    """Coarse classification of the element a chunk was cut at."""

    HEADER = "header"
    CONTENT = "content"


@dataclass(frozen=True, slots=True)
class TextChunk:
    """One run of text, cut at the end of a block element.

    Attributes:
        index: Position of the chunk in traversal order
        text: Trimmed fragments joined by single spaces
        tag_type: HEADER when cut at a heading, otherwise CONTENT
        source_node: The element the chunk was cut at
        standalone: True when the chunk cannot be represented by
            ``source_node`` itself, either because the source holds nested
            blocks (already emitted as their own chunks) or because the chunk
            carries text from outside the source

    """

    index: int
    text: str
    tag_type: TagType
    source_node: Tag
    standalone: bool = False

    @property
    def tag_name(self) -> str:
        return self.source_node.name

    def to_html(self) -> str:
        """Serialize the chunk.

        Standalone chunks become a text-only copy of the source element so
        text from nested blocks is never emitted twice.
        """
        if not self.standalone:
            return str(self.source_node)

        factory = BeautifulSoup("", "lxml")
        if isinstance(self.source_node, BeautifulSoup):
            element = factory.new_tag("div")
        else:
            element = factory.new_tag(self.source_node.name, attrs=dict(self.source_node.attrs))
        element.string = self.text
        return str(element)


class TextBlockExtractor:
    """Produces ordered text chunks from an HTML subtree.

    The extractor holds only configuration; every ``extract`` call keeps its
    own buffer, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        *,
        min_word_threshold: int | None = None,
        inline_tags: frozenset[str] = INLINE_TAGS,
        header_tags: frozenset[str] = HEADER_TAGS,
    ) -> None:
        self._min_word_threshold = min_word_threshold
        self._inline_tags = inline_tags
        self._header_tags = header_tags

    def extract(self, root: Tag) -> list[TextChunk]:
        """Split the text under ``root`` into block-level chunks.

        Args:
            root: Subtree root, normally ``<body>`` or the whole document.

        Returns:
            Chunks in document order. When a minimum word threshold is set,
            shorter chunks are dropped after traversal; surviving chunks keep
            their original indices.

        """
        chunks: list[TextChunk] = []
        buffer: list[str] = []

        # (node, leaving) pairs; an explicit stack keeps deep documents safe
        stack: list[tuple[PageElement, bool]] = [(root, False)]
        while stack:
            node, leaving = stack.pop()

            if leaving:
                if not isinstance(node, Tag) or node.name in self._inline_tags:
                    continue
                if node.name == "p" and not buffer:
                    continue
                chunk = self._flush(buffer, node, len(chunks))
                if chunk is not None:
                    chunks.append(chunk)
                    buffer.clear()
                continue

            if isinstance(node, Tag):
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.contents))
            elif is_visible_text(node):
                text = node.strip()
                if text:
                    buffer.append(text)

        if buffer:
            chunk = self._flush(buffer, root, len(chunks), trailing=True)
            if chunk is not None:
                chunks.append(chunk)

        if self._min_word_threshold is not None:
            chunks = [c for c in chunks if len(c.text.split()) >= self._min_word_threshold]

        return chunks

    def _flush(
        self, buffer: list[str], node: Tag, index: int, *, trailing: bool = False
    ) -> TextChunk | None:
        text = " ".join(buffer).strip()
        if not text:
            return None

        is_header = not trailing and node.name in self._header_tags
        return TextChunk(
            index=index,
            text=text,
            tag_type=TagType.HEADER if is_header else TagType.CONTENT,
            source_node=node,
            standalone=self._has_block_descendant(node) or text != normalized_text(node),
        )

    def _has_block_descendant(self, node: Tag) -> bool:
        return any(tag.name not in self._inline_tags for tag in node.find_all(True))
