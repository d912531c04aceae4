from __future__ import annotations

from functools import lru_cache
from typing import Dict, Iterable, Optional, Tuple

from src.model.analysis import AnalysisCard

DEFAULT_ANALYSIS_CARDS: Tuple[AnalysisCard, ...] = (
    AnalysisCard(
        id="overview",
        title="Research Overview",
        prompt="What are the main objectives and key contributions? Why is this research significant?",
        target_sections=("abstract", "introduction"),
        max_chunks=5,
    ),
    AnalysisCard(
        id="methodology",
        title="Methodology & Approach",
        prompt="What methods were used? Include study design, sample size, and key procedures.",
        target_sections=("methodology",),
        max_chunks=8,
    ),
    AnalysisCard(
        id="findings",
        title="Key Findings & Results",
        prompt="What are the most important results and discoveries? Include key statistics if relevant.",
        target_sections=("results", "discussion"),
        max_chunks=6,
    ),
    AnalysisCard(
        id="assessment",
        title="Critical Assessment",
        prompt="What are the main strengths and limitations? Rate overall quality (1-10) with brief justification.",
        target_sections=("methodology", "discussion", "conclusion"),
        max_chunks=7,
    ),
    AnalysisCard(
        id="impact",
        title="Impact & Applications",
        prompt="What practical applications and future research directions does this enable?",
        target_sections=("discussion", "conclusion"),
        max_chunks=5,
    ),
    AnalysisCard(
        id="personal",
        title="Research Connections",
        prompt="How does this connect to other research areas? What broader trends does it relate to?",
        target_sections=("introduction", "discussion", "references"),
        max_chunks=4,
    ),
)

# Titles stored with saved analyses
ANALYSIS_TYPE_LABELS: Dict[str, str] = {
    "overview": "Research Overview",
    "methodology": "Methodology & Approach",
    "findings": "Key Findings & Results",
    "assessment": "Critical Assessment",
    "impact": "Impact & Applications",
    "personal": "Personal Analysis",
    "custom": "Custom Analysis",
}


def analysis_title_for(card: AnalysisCard) -> str:
    return ANALYSIS_TYPE_LABELS.get(card.id, card.title)


class AnalysisCardCatalog:
    """Read-only registry of analysis cards, in canonical order."""

    def __init__(self, cards: Iterable[AnalysisCard]):
        cards = tuple(cards)
        by_id: Dict[str, AnalysisCard] = {}
        for card in cards:
            if card.id in by_id:
                raise ValueError(f"Duplicate analysis card id: {card.id}")
            by_id[card.id] = card

        self._cards = cards
        self._by_id = by_id

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id

    def list_cards(self) -> Tuple[AnalysisCard, ...]:
        return self._cards

    def get(self, card_id: str) -> Optional[AnalysisCard]:
        return self._by_id.get(card_id)

    def select_cards(self, requested_ids: Iterable[str]) -> Tuple[AnalysisCard, ...]:
        """
        Cards whose id was requested, in registry order. Unknown ids are ignored;
        an empty result is the caller's to reject.
        """
        wanted = set(requested_ids or ())
        return tuple(card for card in self._cards if card.id in wanted)


@lru_cache(maxsize=1)
def get_card_catalog() -> AnalysisCardCatalog:
    """Process-wide catalog, built once from settings or the defaults."""
    from src.config import Config

    if Config.analysis_cards:
        return AnalysisCardCatalog(AnalysisCard.model_validate(c) for c in Config.analysis_cards)
    return AnalysisCardCatalog(DEFAULT_ANALYSIS_CARDS)
