import pytest

from src.exceptions import CompletionFailure
from src.model.fulltext import FullTextSource, ResolvedText
from src.model.paper import PaperDocument, ProcessingStatus
from src.service.analysis_orchestrator import AnalysisOrchestrator, build_analysis_prompt
from src.service.chunking import PaperChunker

from conftest import FakeCompletion


@pytest.fixture
def document(sample_text):
    doc = PaperDocument(id="P1", title="Sparse Attention", authors=["A. Author"])
    doc.attach_full_text(
        ResolvedText(text=sample_text, source=FullTextSource.PROVIDED),
        PaperChunker().chunk(sample_text),
    )
    return doc


def test_every_card_gets_an_entry(document, cards):
    run = AnalysisOrchestrator(complete=FakeCompletion()).run(document, cards)
    assert set(run.outcome) == {"overview", "methodology", "findings"}
    assert all(run.outcome.values())
    assert run.chunks_used == len(document.chunks)
    assert run.elapsed_ms >= 0


def test_one_failing_card_does_not_stop_the_others(document, cards):
    complete = FakeCompletion(fail_on=["What methods were used?"])
    run = AnalysisOrchestrator(complete=complete).run(document, cards)
    assert run.outcome["methodology"] is None
    assert run.outcome["overview"]
    assert run.outcome["findings"]
    assert set(run.produced) == {"overview", "findings"}
    assert len(complete.prompts) == 3


def test_completion_failure_and_blank_reply_leave_card_empty(document, cards):
    def complete(prompt):
        if "key results" in prompt:
            raise CompletionFailure("LLM returned an empty reply")
        return "" if "main objectives" in prompt else "  answer  "

    run = AnalysisOrchestrator(complete=complete).run(document, cards)
    assert run.outcome == {"overview": None, "methodology": "answer", "findings": None}


def test_short_paper_is_sent_whole(document, cards):
    complete = FakeCompletion()
    AnalysisOrchestrator(complete=complete).run(document, cards[:1])
    assert "5. Conclusion" in complete.prompts[0]
    assert "--- Section" not in complete.prompts[0]


def test_long_paper_uses_selected_chunks(document, cards):
    complete = FakeCompletion()
    AnalysisOrchestrator(complete=complete, max_context_chars=10).run(document, cards[1:2])
    prompt = complete.prompts[0]
    assert "--- Section 1 (methodology) ---" in prompt
    assert "5. Conclusion" not in prompt
    assert "Question: What methods were used?" in prompt


def test_prompt_shape(cards):
    prompt = build_analysis_prompt(cards[0], "CONTEXT")
    assert prompt.startswith("Analyze this research paper content")
    assert "CONTEXT" in prompt
    assert prompt.endswith("Response:")


def test_document_text_is_sealed(document):
    assert document.processing_status == ProcessingStatus.RESOLVED
    with pytest.raises(RuntimeError):
        document.attach_full_text(ResolvedText(text="again", source=FullTextSource.PROVIDED), [])


def test_default_job_ranks_chunks_by_embedding():
    from src.jobs.paper_analysis_job import build_default_job
    from src.service.chunking import EmbeddingChunkSelector
    from src.service.llm_service import llm_embedding

    selector = build_default_job().orchestrator.chunk_selector
    assert isinstance(selector, EmbeddingChunkSelector)
    assert selector.embed is llm_embedding
