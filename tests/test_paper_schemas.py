from datetime import datetime

import pytest

from app.core.exceptions import ValidationError
from app.domain.papers.schemas import validate_paper_data


def test_recording_timestamp_is_parsed():
    out = validate_paper_data("recording", {
        "recordingId": "r1",
        "transcript": "hi",
        "duration": 1.5,
        "timestamp": "2025-03-01T12:00:00Z",
    })
    assert isinstance(out["timestamp"], datetime)
    # Defaults no se inyectan
    assert "processingHistory" not in out


def test_recording_rejects_bad_status():
    with pytest.raises(ValidationError, match="Invalid recording data"):
        validate_paper_data("recording", {
            "recordingId": "r1", "transcript": "", "duration": 0,
            "timestamp": "2025-03-01T12:00:00Z", "audioSyncStatus": "lost",
        })


def test_collectible_keeps_extra_keys():
    out = validate_paper_data("collectible", {"itemId": "75192", "status": "have", "created": "yesterday"})
    assert out == {"itemId": "75192", "status": "have", "created": "yesterday"}


def test_document_content_kept_as_sent():
    content = {"type": "doc", "content": [{"type": "paragraph", "attrs": {"x": 1}}]}
    out = validate_paper_data("document", {"documentId": "d1", "title": "T", "content": content, "version": 2})
    assert out["content"] == content
    with pytest.raises(ValidationError):
        validate_paper_data("document", {"documentId": "d1", "title": "T", "content": {"content": []}})


def test_unknown_type_and_non_dict():
    assert validate_paper_data("sketch", {"a": 1}) == {"a": 1}
    with pytest.raises(ValidationError):
        validate_paper_data("note", ["not", "a", "dict"])
