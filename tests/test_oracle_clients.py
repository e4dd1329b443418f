import json
import logging
from types import SimpleNamespace

import openai
import pytest

from api.factory import UnconfiguredOracleClient, create_oracle_client_from_env
from api.google_gemini_client import GeminiOracleClient
from api.openai_client import OpenAIOracleClient
from api.oracle_schema import parse_oracle_response
from config.config import Config
from conftest import FakeOracleClient, oracle_reply
from models.errors import InvalidInput, MalformedOracleResponse, OracleUnavailable
from models.focus_types import UserRole


def _link(i: int, **overrides) -> dict:
    link = {
        "title": f"Result {i}",
        "url": f"https://www.example{i}.org/page",
        "snippet": "Useful material.",
    }
    link.update(overrides)
    return link


# ---------- schema ----------


def test_parse_valid_reply_keeps_oracle_order():
    raw = oracle_reply(links=[_link(i) for i in range(3)])
    verdict = parse_oracle_response(raw, max_links=15)

    assert verdict.is_valid is True
    assert [link.title for link in verdict.suggested_links] == ["Result 0", "Result 1", "Result 2"]


def test_rejection_reply_with_empty_links():
    verdict = parse_oracle_response(
        oracle_reply(is_valid=False, reason="Off topic for a researcher.", links=[]), max_links=15
    )
    assert verdict.is_valid is False
    assert verdict.reason == "Off topic for a researcher."
    assert verdict.suggested_links == ()


def test_blank_thumbnail_is_treated_as_absent():
    raw = oracle_reply(links=[_link(1, thumbnailUrl="  ")])
    verdict = parse_oracle_response(raw, max_links=15)
    assert verdict.suggested_links[0].thumbnail_url is None


def test_link_fields_are_kept_as_supplied():
    raw = oracle_reply(
        links=[
            _link(
                1,
                title="  Cell Biology ",
                snippet=" Lecture notes.\n",
                url=" https://www.example1.org/page",
                thumbnailUrl="https://cdn.example1.org/t.png ",
            )
        ]
    )
    link = parse_oracle_response(raw, max_links=15).suggested_links[0]

    assert link.title == "  Cell Biology "
    assert link.snippet == " Lecture notes.\n"
    assert link.url == " https://www.example1.org/page"
    assert link.thumbnail_url == "https://cdn.example1.org/t.png "


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "not json at all",
        "[]",
        json.dumps({"isValid": True, "reason": "ok"}),
        json.dumps({"isValid": "yes", "reason": "ok", "suggestedLinks": []}),
        json.dumps({"isValid": True, "reason": "ok", "suggestedLinks": [{"title": "t", "url": "https://a.org"}]}),
        oracle_reply(links=[_link(1, url="/relative/path")]),
        oracle_reply(links=[_link(1, url="ftp://files.example.org/x")]),
        oracle_reply(links=[_link(1, title="   ")]),
    ],
)
def test_schema_violations_are_malformed(raw):
    with pytest.raises(MalformedOracleResponse) as exc_info:
        parse_oracle_response(raw, max_links=15)
    assert exc_info.value.message == "Search failed. Please try again later."


def test_too_many_links_is_malformed():
    raw = oracle_reply(links=[_link(i) for i in range(16)])
    with pytest.raises(MalformedOracleResponse) as exc_info:
        parse_oracle_response(raw, max_links=15)
    assert exc_info.value.details["received"] == 16


# ---------- base client ----------


def test_prompt_names_query_role_and_focus():
    client = FakeOracleClient()
    prompt = client.build_prompt("protein folding", UserRole.RESEARCHER)

    assert '"protein folding"' in prompt
    assert "researcher" in prompt
    assert "peer-reviewed" in prompt
    assert "up to 15 helpful links" in prompt


@pytest.mark.parametrize("query, role", [("   ", UserRole.STUDENT), ("algebra", UserRole.UNSET)])
def test_invalid_input_never_reaches_transport(query, role):
    client = FakeOracleClient()
    with pytest.raises(InvalidInput):
        client.validate_and_search(query, role)
    assert client.queries == []


def test_missing_api_key_raises_value_error():
    with pytest.raises(ValueError):
        GeminiOracleClient(api_key="", client=object())


# ---------- gemini ----------


def _fake_genai(reply_text=None, error=None):
    calls = []

    def generate_content(**kwargs):
        calls.append(kwargs)
        if error is not None:
            raise error
        return SimpleNamespace(text=reply_text)

    return SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)), calls


def test_gemini_requests_structured_json():
    fake, calls = _fake_genai(reply_text=oracle_reply(links=[_link(1)]))
    client = GeminiOracleClient(api_key="k", model_name="gemini-test", client=fake)

    verdict = client.validate_and_search("photosynthesis", UserRole.STUDENT)

    assert verdict.is_valid is True
    assert len(calls) == 1
    assert calls[0]["model"] == "gemini-test"
    assert calls[0]["config"].response_mime_type == "application/json"
    assert calls[0]["config"].response_schema is not None


def test_gemini_transport_error_becomes_unavailable():
    fake, _ = _fake_genai(error=ConnectionError("dns failure"))
    client = GeminiOracleClient(api_key="k", client=fake)

    with pytest.raises(OracleUnavailable):
        client.validate_and_search("photosynthesis", UserRole.STUDENT)


def test_gemini_empty_text_is_malformed():
    fake, _ = _fake_genai(reply_text=None)
    client = GeminiOracleClient(api_key="k", client=fake)

    with pytest.raises(MalformedOracleResponse):
        client.validate_and_search("photosynthesis", UserRole.STUDENT)


# ---------- openai ----------


def _fake_openai(content=None, error=None, choices=True):
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        if error is not None:
            raise error
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)] if choices else [])

    completions = SimpleNamespace(create=create)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), calls


def test_openai_uses_json_mode():
    fake, calls = _fake_openai(content=oracle_reply(is_valid=False, reason="Gaming news", links=[]))
    client = OpenAIOracleClient(api_key="k", client=fake)

    verdict = client.validate_and_search("patch notes", UserRole.TEACHER)

    assert verdict.is_valid is False
    assert calls[0]["response_format"] == {"type": "json_object"}
    assert calls[0]["model"] == "gpt-4o-mini"


def test_openai_error_becomes_unavailable():
    fake, _ = _fake_openai(error=openai.OpenAIError("rate limited"))
    client = OpenAIOracleClient(api_key="k", client=fake)

    with pytest.raises(OracleUnavailable):
        client.validate_and_search("algebra", UserRole.STUDENT)


def test_openai_no_choices_is_malformed():
    fake, _ = _fake_openai(choices=False)
    client = OpenAIOracleClient(api_key="k", client=fake)

    with pytest.raises(MalformedOracleResponse):
        client.validate_and_search("algebra", UserRole.STUDENT)


# ---------- factory ----------


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "ORACLE_PROVIDER",
        "GOOGLE_GEMINI_API_KEY",
        "OPENAI_API_KEY",
        "DEFAULT_OPENAI_MODEL",
        "ORACLE_MAX_LINKS",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_factory_requires_provider_key(clean_env):
    with pytest.raises(ValueError, match="GOOGLE_GEMINI_API_KEY"):
        create_oracle_client_from_env(Config())


def test_factory_rejects_unknown_provider(clean_env):
    clean_env.setenv("ORACLE_PROVIDER", "carrier-pigeon")
    config = Config()
    assert config.validate() is False
    with pytest.raises(ValueError, match="Unsupported ORACLE_PROVIDER"):
        create_oracle_client_from_env(config)


def test_factory_builds_openai_client(clean_env):
    clean_env.setenv("ORACLE_PROVIDER", "OpenAI")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("ORACLE_MAX_LINKS", "10")

    client = create_oracle_client_from_env(Config())

    assert isinstance(client, OpenAIOracleClient)
    assert client.max_links == 10
    assert client.model_name == "gpt-4o-mini"


def test_unconfigured_client_fails_every_search(clean_env):
    with pytest.raises(ValueError) as exc_info:
        create_oracle_client_from_env(Config())
    client = UnconfiguredOracleClient(str(exc_info.value))

    with pytest.raises(OracleUnavailable) as unavailable:
        client.validate_and_search("photosynthesis", UserRole.STUDENT)
    assert unavailable.value.message == "Search failed. Please try again later."
    assert "GOOGLE_GEMINI_API_KEY" in client.reason

    with pytest.raises(InvalidInput):
        client.validate_and_search("   ", UserRole.STUDENT)


def test_quiet_validation_logs_nothing(clean_env, caplog):
    config = Config()
    with caplog.at_level(logging.ERROR):
        assert config.validate(log_errors=False) is False
    assert [r for r in caplog.records if r.levelno >= logging.ERROR] == []

    with caplog.at_level(logging.ERROR):
        assert config.validate() is False
    assert any("GOOGLE_GEMINI_API_KEY" in r.getMessage() for r in caplog.records)
