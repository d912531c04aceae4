"""
Section-aware chunking of a paper's full text, and per-card chunk selection.

Chunks are word windows (default 1000 words, 200 overlap) cut inside the
sections found by simple header heuristics. Selection keeps the chunks of
the card's target sections and ranks them by embedding similarity to the
card's question.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, List, Sequence, Tuple

from src.model.analysis import AnalysisCard
from src.model.paper import PaperChunk, SectionType

logger = logging.getLogger(__name__)

EmbedFn = Callable[[List[str]], List[List[float]]]

# first match wins, tested against the first 200 chars of a section
SECTION_PATTERNS: Tuple[Tuple[re.Pattern, SectionType], ...] = (
    (re.compile(r"\b(?:abstract|summary)\b", re.I), SectionType.ABSTRACT),
    (re.compile(r"\b(?:introduction|background)\b", re.I), SectionType.INTRODUCTION),
    (re.compile(r"\b(?:method(?:ology)?|approach|experimental setup|materials and methods)\b", re.I), SectionType.METHODOLOGY),
    (re.compile(r"\b(?:results?|findings|analysis|experiments?)\b", re.I), SectionType.RESULTS),
    (re.compile(r"\b(?:discussion|interpretation|implications)\b", re.I), SectionType.DISCUSSION),
    (re.compile(r"\b(?:conclusion|future work)\b", re.I), SectionType.CONCLUSION),
    (re.compile(r"\b(?:references?|bibliography|citations?)\b", re.I), SectionType.REFERENCES),
)

# a newline followed by "1.", "IV." or an ALL CAPS header line
_SECTION_SPLIT_RE = re.compile(r"\n(?=\s*(?:\d+\.|\b[IVX]+\.|\b[A-Z][A-Z ]{1,50}(?:\n|$)))")

_EQUATION_RE = re.compile(r"\$[^$]+\$|\\\([^)]+\\\)|\\\[[^\]]+\\\]")
_TABLE_RE = re.compile(r"table \d+|tabular|thead|tbody", re.I)
_FIGURE_RE = re.compile(r"figure \d+|fig\. \d+|image|chart", re.I)


def classify_section(text: str) -> SectionType:
    head = text[:200]
    for pattern, section_type in SECTION_PATTERNS:
        if pattern.search(head):
            return section_type
    return SectionType.OTHER


def identify_sections(text: str, min_chars: int = 100) -> List[Tuple[SectionType, str]]:
    sections = []
    for part in _SECTION_SPLIT_RE.split(text or ""):
        part = part.strip()
        if len(part) < min_chars:
            continue
        sections.append((classify_section(part), part))
    return sections


class PaperChunker:

    def __init__(self, chunk_size: int = 1000, overlap: int = 200, min_section_chars: int = 100):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= overlap < chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.min_section_chars = min_section_chars

    @classmethod
    def from_config(cls) -> "PaperChunker":
        from src.config import Config

        return cls(
            chunk_size=Config.analysis.chunk_size,
            overlap=Config.analysis.chunk_overlap,
            min_section_chars=Config.analysis.min_section_chars,
        )

    def chunk(self, text: str) -> List[PaperChunk]:
        sections = identify_sections(text, self.min_section_chars)
        if not sections and text and text.strip():
            # too short to carry headers; keep it whole
            sections = [(SectionType.OTHER, text.strip())]

        chunks: List[PaperChunk] = []
        for section_type, content in sections:
            for window in self._windows(content.split()):
                chunks.append(self._make_chunk(len(chunks), section_type, window))
        return chunks

    def _windows(self, words: List[str]):
        step = self.chunk_size - self.overlap
        for start in range(0, len(words), step):
            yield words[start:start + self.chunk_size]
            if start + self.chunk_size >= len(words):
                break

    @staticmethod
    def _make_chunk(index: int, section_type: SectionType, words: List[str]) -> PaperChunk:
        content = " ".join(words)
        return PaperChunk(
            id=f"chunk_{index}",
            content=content,
            section_type=section_type,
            word_count=len(words),
            has_equations=bool(_EQUATION_RE.search(content)),
            has_tables=bool(_TABLE_RE.search(content)),
            has_figures=bool(_FIGURE_RE.search(content)),
        )


class ChunkSelector:
    """
    Pick at most `card.max_chunks` chunks for a card: the card's target
    sections when any chunk belongs to them, otherwise every chunk.
    Plain selection keeps document order.
    """

    def candidates(self, chunks: Sequence[PaperChunk], card: AnalysisCard) -> List[PaperChunk]:
        candidates = list(chunks)
        if card.target_sections:
            targeted = [c for c in candidates if c.section_type.value in card.target_sections]
            if targeted:
                candidates = targeted
        return candidates

    def select(self, chunks: Sequence[PaperChunk], card: AnalysisCard) -> List[PaperChunk]:
        return self.candidates(chunks, card)[: card.max_chunks]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class EmbeddingChunkSelector(ChunkSelector):
    """
    Rank candidate chunks by cosine similarity between the card's question
    and each chunk, ties broken by document order.

    Chunk vectors are computed once per document and kept on the chunk;
    the question is embedded per card. When the embedding call fails the
    selection degrades to document order.
    """

    def __init__(self, embed: EmbedFn):
        self.embed = embed

    def select(self, chunks: Sequence[PaperChunk], card: AnalysisCard) -> List[PaperChunk]:
        candidates = self.candidates(chunks, card)
        if len(candidates) <= 1:
            return candidates[: card.max_chunks]

        try:
            self._embed_chunks(candidates)
            query = self.embed([card.prompt])[0]
        except Exception as e:
            logger.warning(f"⚠ Embedding failed for card {card.id}, using document order: {e}")
            return candidates[: card.max_chunks]

        scored = [
            (cosine_similarity(query, chunk.embedding), i, chunk)
            for i, chunk in enumerate(candidates)
        ]
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [chunk for _, _, chunk in scored[: card.max_chunks]]

    def _embed_chunks(self, chunks: Sequence[PaperChunk]) -> None:
        missing = [c for c in chunks if c.embedding is None]
        if not missing:
            return
        logger.info(f"🧮 Generating embeddings for {len(missing)} chunks...")
        vectors = self.embed([c.content for c in missing])
        if len(vectors) != len(missing):
            raise ValueError(f"expected {len(missing)} embeddings, got {len(vectors)}")
        for chunk, vector in zip(missing, vectors):
            chunk.embedding = list(vector)


def render_context(chunks: Sequence[PaperChunk]) -> str:
    context = "Research Paper Content:\n\n"
    for i, chunk in enumerate(chunks, start=1):
        context += f"--- Section {i} ({chunk.section_type.value}) ---\n"
        context += chunk.content
        context += "\n\n"
    return context
