from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from app.core.exceptions import NotFound, NotFoundOrDenied
from app.services.transcript_service import NO_PROCESSING, TranscriptService


def _llm(text="Formatted output"):
    llm = MagicMock()
    llm.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
    )
    return llm


@pytest.fixture
def seeded(prompts):
    prompts.initialize_built_in_prompts("user-a")
    return prompts


def test_process_applies_matched_prompt(seeded, recordings):
    llm = _llm()
    svc = TranscriptService(seeded, recordings, llm=llm)
    paper = svc.process("user-a", "rec-1", "Email, tell Sam the build is green", duration=3)

    sent = llm.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert sent.endswith("\n\nTranscript:\ntell Sam the build is green")
    entry = paper["data"]["processingHistory"][0]
    assert entry["output"] == "Formatted output"
    assert entry["promptUsed"]["triggerWord"] == "email"
    assert paper["data"]["transcript"] == "Email, tell Sam the build is green"


def test_process_without_match_passes_through(seeded, recordings):
    llm = _llm()
    svc = TranscriptService(seeded, recordings, llm=llm)
    paper = svc.process("user-a", "rec-1", "Just thinking out loud")
    entry = paper["data"]["processingHistory"][0]
    assert entry["output"] == "Just thinking out loud"
    assert entry["promptUsed"] == {"triggerWord": "none", "promptText": NO_PROCESSING}
    llm.chat.completions.create.assert_not_called()


def test_process_uses_fallback_trigger_word(seeded, recordings):
    svc = TranscriptService(seeded, recordings, llm=_llm("Summary"))
    paper = svc.process("user-a", "rec-1", "Long meeting about budgets", trigger_word="Summarize")
    entry = paper["data"]["processingHistory"][0]
    assert entry["promptUsed"]["triggerWord"] == "summarize"
    assert entry["output"] == "Summary"


def test_process_without_llm_keeps_transcript(seeded, recordings):
    svc = TranscriptService(seeded, recordings, llm=None)
    paper = svc.process("user-a", "rec-1", "Notes: sprint planning")
    entry = paper["data"]["processingHistory"][0]
    assert entry["promptUsed"]["triggerWord"] == "notes"
    assert entry["output"] == "sprint planning"


def test_process_llm_error_falls_back(seeded, recordings):
    llm = MagicMock()
    llm.chat.completions.create.side_effect = OpenAIError("boom")
    svc = TranscriptService(seeded, recordings, llm=llm)
    paper = svc.process("user-a", "rec-1", "clean um so basically yes")
    assert paper["data"]["processingHistory"][0]["output"] == "um so basically yes"


def test_reprocess_appends_entry(seeded, recordings):
    svc = TranscriptService(seeded, recordings, llm=_llm("First"))
    paper = svc.process("user-a", "rec-1", "email tell Sam hi")
    svc.llm = _llm("As todo")
    updated = svc.reprocess("user-a", paper["id"], "to do")
    history = updated["data"]["processingHistory"]
    assert [e["output"] for e in history] == ["First", "As todo"]
    assert history[-1]["promptUsed"]["triggerWord"] == "to do"


def test_reprocess_errors(seeded, recordings):
    svc = TranscriptService(seeded, recordings, llm=None)
    paper = svc.process("user-a", "rec-1", "hello")
    with pytest.raises(NotFound):
        svc.reprocess("user-a", paper["id"], "unknown")
    with pytest.raises(NotFoundOrDenied):
        svc.reprocess("user-b", paper["id"], "email")
