import pytest
from sqlalchemy.exc import OperationalError

from src.app.exceptions import UpstreamError, ValidationError
from src.models.allowlist import AllowlistEntry
from src.models.poem import Poem
from src.services.generation import (
    ContentProviderError,
    GenerationSettings,
    PoetryService,
    load_generation_settings,
    save_generated_poem,
)
from src.services.generation.prompts import (
    BASIC_PROMPT,
    DIRTY_LIMERICK_PROMPT,
    HAIKU_PROMPT,
    prompt_for,
    sketch_prompt,
)


@pytest.fixture
def provider(mocker):
    return mocker.MagicMock()


@pytest.fixture
def service(provider):
    return PoetryService(client_factory=lambda api_key: provider)


def test_prompt_selection():
    assert prompt_for("dirty-limerick") == DIRTY_LIMERICK_PROMPT
    assert prompt_for("dirty-haiku") == HAIKU_PROMPT
    assert prompt_for(None) == BASIC_PROMPT
    assert prompt_for("sonnet") == BASIC_PROMPT


def test_sketch_prompt_includes_poem():
    prompt = sketch_prompt("Dusk", "the light leaves")
    assert "Title: Dusk" in prompt
    assert "the light leaves" in prompt


def test_missing_api_key(service, provider):
    with pytest.raises(ValidationError) as exc:
        service.generate_poem(GenerationSettings(), b"img", "image/jpeg")

    assert exc.value.code == "MISSING_API_KEY"
    assert "Gemini API Key is missing" in exc.value.message
    provider.generate_poem.assert_not_called()


def test_generate_poem_adds_date_parts(service, provider):
    provider.generate_poem.return_value = {
        "title": "Harbor",
        "poem": "boats at rest",
        "palette": ["#112233", "#445566"],
    }

    result = service.generate_poem(
        GenerationSettings(api_key="k", timezone="Europe/Paris"),
        b"img",
        "image/png",
        "dirty-haiku",
    )

    assert result["title"] == "Harbor"
    assert result["palette"] == ["#112233", "#445566"]
    assert {"dayOfWeek", "date", "month", "year"} <= set(result)
    provider.generate_poem.assert_called_once_with(b"img", "image/png", HAIKU_PROMPT)


def test_generate_poem_tolerates_missing_fields(service, provider):
    provider.generate_poem.return_value = {"poem": "only words", "palette": "red"}

    result = service.generate_poem(GenerationSettings(api_key="k"), b"img", "image/jpeg")

    assert result["title"] == ""
    assert result["palette"] == []


def test_provider_failure_is_upstream_error(service, provider):
    provider.generate_poem.side_effect = ContentProviderError("Failed to generate valid JSON")

    with pytest.raises(UpstreamError) as exc:
        service.generate_poem(GenerationSettings(api_key="k"), b"img", "image/jpeg")

    assert exc.value.message == "Internal server error"
    assert "Failed to generate valid JSON" in exc.value.detail


def test_generate_sketch(service, provider):
    provider.generate_sketch.return_value = b"PNG"

    assert service.generate_sketch(GenerationSettings(api_key="k"), "Dusk", "words") == b"PNG"


def test_load_generation_settings(db_session):
    db_session.add(AllowlistEntry(subject_id="alice", api_key="k", timezone="UTC", pen_name="Al"))
    db_session.commit()

    settings = load_generation_settings(db_session, "alice")

    assert settings == GenerationSettings(api_key="k", timezone="UTC", pen_name="Al")
    assert load_generation_settings(db_session, "nobody") == GenerationSettings()


def test_load_generation_settings_on_database_error(mocker):
    db = mocker.MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

    assert load_generation_settings(db, "alice") == GenerationSettings()


def test_save_generated_poem(db_session, session_factory):
    generated = {
        "title": "Harbor",
        "poem": "boats at rest",
        "palette": ["#112233"],
        "dayOfWeek": "Monday",
        "date": 3,
        "month": "March",
        "year": 2025,
    }

    save_generated_poem(session_factory, "alice", generated, pen_name="Al")

    poem = db_session.query(Poem).one()
    assert poem.owner_id == "alice"
    assert poem.author_alias == "Al"
    assert poem.text == "boats at rest"
    assert poem.extra_data == {"dayOfWeek": "Monday", "date": 3, "month": "March", "year": 2025}


def test_save_generated_poem_swallows_database_errors(mocker):
    db = mocker.MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("down"))

    save_generated_poem(lambda: db, "alice", {"title": "T", "poem": "P"})

    db.rollback.assert_called_once()
    db.close.assert_called_once()
