"""Extraction of proposed actions from assistant output.

 The tokenizer walks the text once and yields well-formed tag fragments; the
 extractor turns each fragment into a typed action or skips it.

 The main entry point is ``extract``.
 """

from .extractor import ActionExtractor, extract
from .tokenizer import RagLink, TagFragment, iter_rag_links, iter_tags

__all__ = [
    "ActionExtractor",
    "RagLink",
    "TagFragment",
    "extract",
    "iter_rag_links",
    "iter_tags",
]
