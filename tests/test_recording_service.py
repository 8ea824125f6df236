from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import NotFound, NotFoundOrDenied, ValidationError
from app.services.recording_service import RecordingPaperService

BASE = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _fields(recording_id, minutes=0, **extra):
    out = {
        "recordingId": recording_id,
        "transcript": "email tell Sam the build is green",
        "duration": 4.2,
        "timestamp": BASE + timedelta(minutes=minutes),
        "promptUsed": {"triggerWord": "email", "promptText": "Write an email"},
        "processedOutput": "Hi Sam, the build is green.",
    }
    out.update(extra)
    return out


def test_create_recording_uses_recordings_tag(recordings, tags):
    paper = recordings.create_recording("user-a", _fields("rec-1"))
    tag = tags.get_or_create_named_tag("user-a", "folder", "recordings")
    assert paper["type"] == "recording"
    assert [t["id"] for t in paper["tags"]] == [tag["id"]]
    data = paper["data"]
    assert data["recordingId"] == "rec-1"
    assert data["audioSyncStatus"] == "pending"
    assert data["audioUrl"] is None
    assert len(data["processingHistory"]) == 1
    assert data["processingHistory"][0]["output"] == "Hi Sam, the build is green."
    assert data["processingHistory"][0]["promptUsed"]["triggerWord"] == "email"


def test_recordings_share_one_tag(db, recordings):
    recordings.create_recording("user-a", _fields("rec-1"))
    recordings.create_recording("user-a", _fields("rec-2"))
    assert db["tags"].count_documents({"ownerUserId": "user-a", "value": "recordings"}) == 1


def test_list_recordings_newest_first_and_capped(db, tags):
    svc = RecordingPaperService(db, tags, list_limit=2)
    for i in range(3):
        svc.create_recording("user-a", _fields(f"rec-{i}", minutes=i))
    result = svc.list_recordings("user-a")
    assert [r["data"]["recordingId"] for r in result] == ["rec-2", "rec-1"]


def test_list_recordings_ignores_other_users(recordings):
    recordings.create_recording("user-a", _fields("rec-a"))
    assert recordings.list_recordings("user-b") == []


def test_get_recording(recordings):
    recordings.create_recording("user-a", _fields("rec-1"))
    assert recordings.get_recording("user-a", "rec-1")["data"]["recordingId"] == "rec-1"
    with pytest.raises(NotFound):
        recordings.get_recording("user-b", "rec-1")


def test_reprocess_appends_history(db, recordings):
    paper = recordings.create_recording("user-a", _fields("rec-1"))
    before = db["papers"].find_one({})["data"]["processingHistory"]
    for n in range(3):
        recordings.reprocess_recording(
            paper["id"], "user-a", f"output {n}", {"triggerWord": "notes", "promptText": "Notes"},
        )
    after = db["papers"].find_one({})["data"]["processingHistory"]
    assert len(after) == len(before) + 3
    assert after[: len(before)] == before
    assert [e["output"] for e in after[len(before):]] == ["output 0", "output 1", "output 2"]


def test_reprocess_is_owner_only(recordings, tags):
    paper = recordings.create_recording("user-a", _fields("rec-1"))
    tag = tags.get_or_create_named_tag("user-a", "folder", "recordings")
    tags.add_user_to_tag(tag["id"], "user-b", "write", "user-a")
    with pytest.raises(NotFoundOrDenied):
        recordings.reprocess_recording(paper["id"], "user-b", "x", {"triggerWord": "t", "promptText": "p"})
    with pytest.raises(NotFoundOrDenied):
        recordings.reprocess_recording("5f0000000000000000000000", "user-a", "x", {})


def test_update_audio_status(recordings):
    recordings.create_recording("user-a", _fields("rec-1"))
    assert recordings.update_audio_status("rec-1", "user-a", "uploaded", "https://cdn/rec-1.m4a")
    data = recordings.get_recording("user-a", "rec-1")["data"]
    assert data["audioSyncStatus"] == "uploaded"
    assert data["audioUrl"] == "https://cdn/rec-1.m4a"


def test_update_audio_status_other_user_is_silent_noop(recordings):
    recordings.create_recording("user-a", _fields("rec-x"))
    assert recordings.update_audio_status("rec-x", "user-b", "uploaded", "https://evil") is False
    data = recordings.get_recording("user-a", "rec-x")["data"]
    assert data["audioSyncStatus"] == "pending"
    assert data["audioUrl"] is None


def test_update_audio_status_rejects_unknown_status(recordings):
    with pytest.raises(ValidationError):
        recordings.update_audio_status("rec-1", "user-a", "done")


def test_list_pending_sync_oldest_first(recordings):
    recordings.create_recording("user-a", _fields("late", minutes=10))
    recordings.create_recording("user-a", _fields("early", minutes=1))
    recordings.create_recording("user-a", _fields("synced", minutes=5))
    recordings.update_audio_status("synced", "user-a", "uploaded")
    assert [r["data"]["recordingId"] for r in recordings.list_pending_sync("user-a")] == ["early", "late"]


def test_delete_recording(db, recordings):
    recordings.create_recording("user-a", _fields("rec-1"))
    with pytest.raises(NotFound):
        recordings.delete_recording("user-b", "rec-1")
    assert recordings.delete_recording("user-a", "rec-1") == {"success": True}
    assert db["papers"].count_documents({}) == 0


def test_latest_processed_output():
    assert RecordingPaperService.get_latest_processed_output({"data": {"processingHistory": []}}) is None
    paper = {"data": {"processingHistory": [{"output": "a"}, {"output": "b"}]}}
    assert RecordingPaperService.get_latest_processed_output(paper) == {"output": "b"}


def test_missing_prompt_defaults_to_no_processing(recordings):
    paper = recordings.create_recording("user-a", _fields("rec-1", promptUsed=None))
    assert paper["data"]["processingHistory"][0]["promptUsed"] == {
        "triggerWord": "none",
        "promptText": "No processing applied",
    }
