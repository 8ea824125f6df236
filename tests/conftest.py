import mongomock
import pytest

from app.services.paper_service import PaperService
from app.services.path_service import PathService
from app.services.prompt_service import PromptService
from app.services.recording_service import RecordingPaperService
from app.services.tag_service import TagService

SYSTEM_USER = "system-user"


@pytest.fixture
def db():
    return mongomock.MongoClient()["maple_test"]


@pytest.fixture
def tags(db):
    return TagService(db, default_tag_value="Lego")


@pytest.fixture
def papers(db, tags):
    return PaperService(db, tags)


@pytest.fixture
def paths(db, tags):
    return PathService(db, tags)


@pytest.fixture
def recordings(db, tags, papers):
    return RecordingPaperService(db, tags, papers, list_limit=100)


@pytest.fixture
def prompts(db):
    return PromptService(db, SYSTEM_USER)


@pytest.fixture
def folder(tags):
    """Carpeta "Lego" de user-a (write sólo para user-a)."""
    return tags.create_tag("user-a", {"kind": "folder", "value": "Lego"})
