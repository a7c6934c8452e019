import pytest

from diffcritic.core.config import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_action_inputs_take_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INPUT_OPENAI_API_MODEL", "gpt-4-1106-preview")
        monkeypatch.setenv("OPENAI_API_MODEL", "gpt-3.5-turbo")
        monkeypatch.setenv("INPUT_EXCLUDE", "*.md,dist/**")

        settings = Settings()

        assert settings.openai_api_model == "gpt-4-1106-preview"
        assert settings.exclude == "*.md,dist/**"

    def test_plain_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INPUT_OPENAI_API_MODEL", raising=False)
        monkeypatch.setenv("OPENAI_API_MODEL", "gpt-4o")
        monkeypatch.setenv("MAX_CONCURRENT_UNITS", "4")

        settings = Settings()

        assert settings.openai_api_model == "gpt-4o"
        assert settings.max_concurrent_units == 4

    def test_empty_action_input_falls_back_to_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("OPENAI_API_MODEL", raising=False)
        monkeypatch.setenv("INPUT_OPENAI_API_MODEL", "")

        assert Settings().openai_api_model == "gpt-4"

    def test_secrets_are_masked(self) -> None:
        settings = Settings(github_token="ghp_secret", openai_api_key="sk-secret")

        assert "ghp_secret" not in repr(settings)
        assert settings.github_token.get_secret_value() == "ghp_secret"

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(max_concurrent_units=0)
