from __future__ import annotations

from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, cast
from unittest.mock import AsyncMock

import pytest

from core.trans.engines.trans_gemini import GeminiTranslation
from core.trans.interface import BackendNotConfiguredError, TranslateExceptionError, TranslationRateLimitError
from core.trans.suspension import SuspensionRegistry
from handlers.async_comm import AsyncCommError

if TYPE_CHECKING:
    from config.loader import Config


def gemini_response(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def config() -> Config:
    return cast(
        "Config",
        SimpleNamespace(
            TRANSLATION=SimpleNamespace(MAX_API_KEYS=3),
            GEMINI=SimpleNamespace(MODEL="gemini-test", URL="https://gemini.local/models/", TIMEOUT=15.0, TEMPERATURE=0.1),
        ),
    )


@pytest.fixture
def registry() -> SuspensionRegistry:
    return SuspensionRegistry(5)


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch, config: Config, registry: SuspensionRegistry) -> GeminiTranslation:
    monkeypatch.setenv("GEMINI_API_OAUTH", "k0, k1,k2,k3")
    engine = GeminiTranslation()
    engine.initialize(config)
    engine.bind_suspension_registry(registry)
    return engine


def mock_post(monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation, **kwargs: Any) -> AsyncMock:
    post = AsyncMock(**kwargs)
    assert engine._http is not None
    monkeypatch.setattr(engine._http, "post", post)
    return post


def test_keys_are_capped_and_registered(engine: GeminiTranslation, registry: SuspensionRegistry) -> None:
    assert engine.key_count == 3
    assert registry.key_count("gemini") == 3
    assert engine.is_available is True


def test_initialize_without_keys(monkeypatch: pytest.MonkeyPatch, config: Config) -> None:
    monkeypatch.delenv("GEMINI_API_OAUTH", raising=False)

    with pytest.raises(BackendNotConfiguredError):
        GeminiTranslation().initialize(config)


def test_payload_prompts(engine: GeminiTranslation) -> None:
    explicit: dict[str, Any] = engine.build_payload("привіт", "Ukrainian", "English")
    auto: dict[str, Any] = engine.build_payload("привіт", "auto", "English")

    prompt: str = explicit["contents"][0]["parts"][0]["text"]
    assert "from Ukrainian to English" in prompt
    assert prompt.endswith("привіт")
    assert "Detect the language" in auto["contents"][0]["parts"][0]["text"]
    assert explicit["generationConfig"]["temperature"] == 0.1


@pytest.mark.asyncio
async def test_translate_uses_first_key(monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation) -> None:
    post: AsyncMock = mock_post(monkeypatch, engine, return_value=gemini_response("  hello \n"))

    assert await engine.translate("привіт", "Ukrainian", "English") == "hello"
    kwargs: dict[str, Any] = post.await_args.kwargs
    assert kwargs["url"] == "https://gemini.local/models/gemini-test:generateContent"
    assert kwargs["params"] == {"key": "k0"}


@pytest.mark.asyncio
async def test_translate_skips_suspended_keys(
    monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation, registry: SuspensionRegistry
) -> None:
    registry.suspend("gemini", "key-0")
    post: AsyncMock = mock_post(monkeypatch, engine, return_value=gemini_response("hello"))

    await engine.translate("привіт", "Ukrainian", "English")

    assert post.await_args.kwargs["params"] == {"key": "k1"}


@pytest.mark.asyncio
async def test_translate_429_reports_key(monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation) -> None:
    mock_post(monkeypatch, engine, side_effect=AsyncCommError("Error response from the server.", status=429))

    with pytest.raises(TranslationRateLimitError) as excinfo:
        await engine.translate("привіт", "Ukrainian", "English")

    assert excinfo.value.key_id == "key-0"
    assert excinfo.value.suspension_key == "gemini:key-0"


@pytest.mark.asyncio
async def test_translate_tries_next_key_after_error(monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation) -> None:
    post: AsyncMock = mock_post(
        monkeypatch,
        engine,
        side_effect=[AsyncCommError("server error", status=500), {"unexpected": True}, gemini_response("hello")],
    )

    assert await engine.translate("привіт", "Ukrainian", "English") == "hello"
    assert [call.kwargs["params"]["key"] for call in post.await_args_list] == ["k0", "k1", "k2"]


@pytest.mark.asyncio
async def test_translate_all_keys_failed(monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation) -> None:
    mock_post(monkeypatch, engine, side_effect=AsyncCommError("server error", status=500))

    with pytest.raises(TranslateExceptionError, match="attempted: 3"):
        await engine.translate("привіт", "Ukrainian", "English")


@pytest.mark.asyncio
async def test_translate_all_keys_suspended(
    monkeypatch: pytest.MonkeyPatch, engine: GeminiTranslation, registry: SuspensionRegistry
) -> None:
    for index in range(3):
        registry.suspend("gemini", f"key-{index}")
    post: AsyncMock = mock_post(monkeypatch, engine, return_value=gemini_response("hello"))

    with pytest.raises(TranslateExceptionError, match="suspended"):
        await engine.translate("привіт", "Ukrainian", "English")
    post.assert_not_awaited()
    assert registry.is_suspended("gemini") is True


@pytest.mark.asyncio
async def test_close(engine: GeminiTranslation) -> None:
    await engine.close()

    assert engine.is_available is False
