import pytest

from app.core.exceptions import AccessDenied, NotFound, NotFoundOrDenied, ValidationError

LEGO = {"itemId": "75192", "status": "want", "quantity": 1}


@pytest.fixture
def paper(papers, folder):
    return papers.create_paper("user-a", {"tags": [folder["id"]], "type": "collectible", "data": dict(LEGO)})


def test_create_paper_populates_tags(paper, folder):
    assert paper["createdBy"] == "user-a"
    assert paper["type"] == "collectible"
    assert [t["id"] for t in paper["tags"]] == [folder["id"]]
    assert paper["tags"][0]["value"] == "Lego"
    assert paper["data"]["itemId"] == "75192"


@pytest.mark.parametrize("payload,message", [
    ({"tags": [], "type": "note"}, "A tag is required"),
    ({"type": "note"}, "A tag is required"),
    ({"tags": ["5f0000000000000000000000"]}, "Type is required"),
    ({"tags": ["nope"], "type": "note"}, "Invalid tag id"),
])
def test_create_paper_validation(papers, payload, message):
    with pytest.raises(ValidationError, match=message):
        papers.create_paper("user-a", payload)


def test_create_paper_requires_write_on_first_tag(papers, tags, folder):
    tags.add_user_to_tag(folder["id"], "user-b", "read", "user-a")
    with pytest.raises(NotFoundOrDenied):
        papers.create_paper("user-b", {"tags": [folder["id"]], "type": "note", "data": {}})


def test_create_paper_only_checks_first_tag(papers, tags, folder):
    other = tags.create_tag("user-b", {"kind": "custom", "value": "B's"})
    created = papers.create_paper("user-a", {"tags": [folder["id"], other["id"]], "type": "note", "data": {}})
    assert [t["id"] for t in created["tags"]] == [folder["id"], other["id"]]


def test_create_paper_validates_known_type(papers, folder):
    with pytest.raises(ValidationError, match="Invalid collectible data"):
        papers.create_paper("user-a", {"tags": [folder["id"]], "type": "collectible", "data": {"itemId": "1", "status": "lost"}})


def test_unknown_type_passes_through(papers, folder):
    created = papers.create_paper("user-a", {"tags": [folder["id"]], "type": "sketch", "data": {"anything": [1, 2]}})
    assert created["data"] == {"anything": [1, 2]}


def test_get_paper_owner_and_shared(papers, tags, paper, folder):
    assert papers.get_paper(paper["id"], "user-a")["id"] == paper["id"]
    with pytest.raises(AccessDenied):
        papers.get_paper(paper["id"], "user-b")
    tags.add_user_to_tag(folder["id"], "user-b", "read", "user-a")
    assert papers.get_paper(paper["id"], "user-b")["id"] == paper["id"]


def test_get_paper_access_is_union_over_tags(papers, tags, folder):
    other = tags.create_tag("user-a", {"kind": "custom", "value": "misc"})
    created = papers.create_paper("user-a", {"tags": [folder["id"], other["id"]], "type": "note", "data": {}})
    tags.add_user_to_tag(other["id"], "user-b", "read", "user-a")
    assert papers.get_paper(created["id"], "user-b")["id"] == created["id"]


def test_get_missing_paper(papers):
    with pytest.raises(NotFound):
        papers.get_paper("5f0000000000000000000000", "user-a")
    with pytest.raises(NotFound):
        papers.get_paper("garbage", "user-a")


def test_list_user_papers_filters_by_type(papers, paper, folder):
    papers.create_paper("user-a", {"tags": [folder["id"]], "type": "note", "data": {"title": "x"}})
    result = papers.list_user_papers("user-a", "collectible")
    assert len(result) == 1
    assert result[0]["data"]["itemId"] == "75192"
    assert len(papers.list_user_papers("user-a")) == 2


def test_list_user_papers_union_is_deduplicated(papers, tags, paper, folder):
    tags.add_user_to_tag(folder["id"], "user-b", "write", "user-a")
    own = papers.create_paper("user-b", {"tags": [folder["id"]], "type": "note", "data": {}})
    ids = [p["id"] for p in papers.list_user_papers("user-b")]
    assert sorted(ids) == sorted([paper["id"], own["id"]])
    assert len(ids) == len(set(ids))


def test_list_papers_by_tag_requires_grant(papers, paper, folder):
    with pytest.raises(NotFound):
        papers.list_papers_by_tag("user-b", folder["id"])


def test_list_papers_by_tag_ignores_ownership(papers, tags, paper, folder):
    tags.add_user_to_tag(folder["id"], "user-b", "read", "user-a")
    result = papers.list_papers_by_tag("user-b", folder["id"], "collectible")
    assert [p["id"] for p in result] == [paper["id"]]
    assert papers.list_papers_by_tag("user-b", folder["id"], "note") == []


def test_update_requires_write_grant(papers, tags, paper, folder):
    tags.add_user_to_tag(folder["id"], "user-b", "read", "user-a")
    with pytest.raises(AccessDenied):
        papers.update_paper(paper["id"], "user-b", {"data": {"status": "have"}})

    tags.add_user_to_tag(folder["id"], "user-b", "write", "user-a")
    updated = papers.update_paper(paper["id"], "user-b", {"data": {"status": "have"}})
    assert updated["data"]["status"] == "have"
    assert updated["data"]["itemId"] == "75192"
    assert updated["createdBy"] == "user-a"


def test_failed_update_does_not_mutate(db, papers, paper):
    with pytest.raises(AccessDenied):
        papers.update_paper(paper["id"], "user-b", {"data": {"status": "have"}})
    stored = db["papers"].find_one({})
    assert stored["data"]["status"] == "want"


def test_update_strips_created_by(papers, paper):
    updated = papers.update_paper(paper["id"], "user-a", {"createdBy": "user-z", "data": {"quantity": 3}})
    assert updated["createdBy"] == "user-a"
    assert updated["data"]["quantity"] == 3


def test_update_rejects_empty_tags_and_invalid_data(papers, paper):
    with pytest.raises(ValidationError):
        papers.update_paper(paper["id"], "user-a", {"tags": []})
    with pytest.raises(ValidationError):
        papers.update_paper(paper["id"], "user-a", {"data": {"quantity": -1}})


def test_delete_is_owner_only(db, papers, tags, paper, folder):
    tags.add_user_to_tag(folder["id"], "user-b", "write", "user-a")
    with pytest.raises(AccessDenied):
        papers.delete_paper(paper["id"], "user-b")
    assert papers.delete_paper(paper["id"], "user-a") == {"success": True}
    assert db["papers"].count_documents({}) == 0
    with pytest.raises(NotFound):
        papers.delete_paper(paper["id"], "user-a")


@pytest.fixture
def reprocessed(recordings):
    rec = recordings.create_recording("user-a", {
        "recordingId": "rec-1",
        "transcript": "notes standup",
        "promptUsed": {"triggerWord": "notes", "promptText": "Notes"},
        "processedOutput": "first",
    })
    return recordings.reprocess_recording(rec["id"], "user-a", "second", {"triggerWord": "clean", "promptText": "Clean"})


@pytest.mark.parametrize("user_id", ["user-a", "user-b"])
def test_update_cannot_rewrite_processing_history(db, papers, tags, reprocessed, user_id):
    rec_tag = reprocessed["tags"][0]["id"]
    tags.add_user_to_tag(rec_tag, "user-b", "write", "user-a")

    with pytest.raises(ValidationError, match="processingHistory"):
        papers.update_paper(reprocessed["id"], user_id, {"data": {"processingHistory": []}})
    with pytest.raises(ValidationError, match="processingHistory"):
        papers.update_paper(reprocessed["id"], user_id, {"data": {"processingHistory": None, "transcript": "x"}})

    stored = db["papers"].find_one({})
    assert [e["output"] for e in stored["data"]["processingHistory"]] == ["first", "second"]
    assert stored["data"]["transcript"] == "notes standup"


@pytest.mark.parametrize("user_id", ["user-a", "user-b"])
def test_update_cannot_change_recording_type(db, papers, tags, reprocessed, user_id):
    tags.add_user_to_tag(reprocessed["tags"][0]["id"], "user-b", "write", "user-a")
    with pytest.raises(ValidationError, match="type of a recording"):
        papers.update_paper(reprocessed["id"], user_id, {"type": "note", "data": {"processingHistory": []}})
    assert db["papers"].find_one({})["type"] == "recording"


def test_recording_other_fields_still_editable_by_shared_writer(papers, tags, reprocessed):
    tags.add_user_to_tag(reprocessed["tags"][0]["id"], "user-b", "write", "user-a")
    updated = papers.update_paper(reprocessed["id"], "user-b", {"type": "recording", "data": {"transcript": "notes retro"}})
    assert updated["data"]["transcript"] == "notes retro"
    assert len(updated["data"]["processingHistory"]) == 2


def test_update_cannot_turn_paper_into_recording(papers, paper):
    with pytest.raises(ValidationError, match="type of a recording"):
        papers.update_paper(paper["id"], "user-a", {"type": "recording"})
