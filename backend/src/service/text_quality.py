from __future__ import annotations

from typing import Optional, Union

from src.model.fulltext import TextQuality

WORDS_PER_PAGE = 250


def _as_text(text: Union[str, bytes, None]) -> str:
    if text is None:
        return ""
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    if not isinstance(text, str):
        return str(text)
    return text


def validate_text(
    text: Union[str, bytes, None],
    min_chars: Optional[int] = None,
    min_words: Optional[int] = None,
) -> TextQuality:
    """
    判断提取出的文本是否足够用于分析。

    Never raises: undecodable bytes and odd whitespace only lower the counts.
    """
    from src.config import Config

    if min_chars is None:
        min_chars = Config.text_quality.min_chars
    if min_words is None:
        min_words = Config.text_quality.min_words

    stripped = _as_text(text).replace("\u0000", "").strip()
    word_count = len(stripped.split())

    return TextQuality(
        is_valid=len(stripped) >= min_chars and word_count >= min_words,
        word_count=word_count,
        char_count=len(stripped),
        estimated_pages=max(1, word_count // WORDS_PER_PAGE),
    )
