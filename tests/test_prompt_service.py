import pytest

from app.core.exceptions import AccessDenied, Conflict, NotFound, ValidationError
from app.services.prompt_service import BUILT_IN_PROMPTS

SYSTEM_USER = "system-user"


def test_create_prompt_normalizes_and_defaults(prompts):
    p = prompts.create_prompt("user-a", {"triggerWord": "  Grocery ", "promptText": "Make a list"})
    assert p["triggerWord"] == "grocery"
    assert p["icon"] == "mic"
    assert p["color"] == "blue"
    assert p["isBuiltIn"] is False
    assert p["isActive"] is True


def test_create_prompt_conflict_and_validation(prompts):
    prompts.create_prompt("user-a", {"triggerWord": "grocery", "promptText": "x"})
    with pytest.raises(Conflict):
        prompts.create_prompt("user-a", {"triggerWord": "GROCERY", "promptText": "y"})
    with pytest.raises(ValidationError):
        prompts.create_prompt("user-a", {"triggerWord": "", "promptText": "y"})
    # Otro usuario puede usar la misma palabra
    prompts.create_prompt("user-b", {"triggerWord": "grocery", "promptText": "z"})


def test_list_includes_system_prompts(prompts):
    prompts.initialize_system_prompts()
    prompts.create_prompt("user-a", {"triggerWord": "grocery", "promptText": "x"})
    triggers = {p["triggerWord"] for p in prompts.list_prompts("user-a")}
    assert triggers == {b["triggerWord"] for b in BUILT_IN_PROMPTS} | {"grocery"}
    assert {p["triggerWord"] for p in prompts.list_prompts("user-b")} == {b["triggerWord"] for b in BUILT_IN_PROMPTS}


def test_system_prompts_initialize_once(db, prompts):
    first = prompts.initialize_system_prompts()
    second = prompts.initialize_system_prompts()
    assert first["count"] == len(BUILT_IN_PROMPTS)
    assert second["message"] == "System prompts already initialized"
    assert db["custom_prompts"].count_documents({"userId": SYSTEM_USER}) == len(BUILT_IN_PROMPTS)


def test_built_in_prompts_are_idempotent_and_immutable(db, prompts):
    created = prompts.initialize_built_in_prompts("user-a")
    assert len(created) == len(BUILT_IN_PROMPTS)
    assert prompts.initialize_built_in_prompts("user-a") == []

    builtin = created[0]
    with pytest.raises(AccessDenied):
        prompts.update_prompt("user-a", builtin["id"], {"promptText": "changed"})
    with pytest.raises(AccessDenied):
        prompts.delete_prompt("user-a", builtin["id"])


def test_update_prompt(prompts):
    p = prompts.create_prompt("user-a", {"triggerWord": "grocery", "promptText": "x"})
    prompts.create_prompt("user-a", {"triggerWord": "shopping", "promptText": "y"})
    updated = prompts.update_prompt("user-a", p["id"], {"promptText": "new", "isActive": False})
    assert updated["promptText"] == "new"
    assert updated["isActive"] is False
    with pytest.raises(Conflict):
        prompts.update_prompt("user-a", p["id"], {"triggerWord": "Shopping"})
    with pytest.raises(NotFound):
        prompts.update_prompt("user-b", p["id"], {"promptText": "steal"})


def test_delete_prompt(db, prompts):
    p = prompts.create_prompt("user-a", {"triggerWord": "grocery", "promptText": "x"})
    with pytest.raises(NotFound):
        prompts.delete_prompt("user-b", p["id"])
    assert prompts.delete_prompt("user-a", p["id"])["message"] == "Prompt deleted successfully"
    assert db["custom_prompts"].count_documents({}) == 0


def test_find_by_trigger_skips_inactive(prompts):
    p = prompts.create_prompt("user-a", {"triggerWord": "grocery", "promptText": "x"})
    assert prompts.find_by_trigger("user-a", "Grocery")["promptText"] == "x"
    prompts.update_prompt("user-a", p["id"], {"isActive": False})
    assert prompts.find_by_trigger("user-a", "grocery") is None
