"""Tests for the config module."""

from basebridge.config import Settings, _parse_cors_origins


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        result = _parse_cors_origins()
        assert result == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        result = _parse_cors_origins()
        assert result == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        """Test parsing empty CORS origins defaults to wildcard."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        result = _parse_cors_origins()
        assert result == ["*"]


class TestSettings:
    """Test Settings configuration."""

    def test_settings_defaults(self):
        """Test Settings initialization with default values."""
        settings = Settings()

        assert settings.formula_strategy in {"static", "hybrid", "original", "omit"}
        assert settings.max_nesting_depth > 0
        assert settings.max_formula_length > 0
        assert isinstance(settings.debug, bool)

    def test_settings_explicit_values(self, mock_settings):
        """Test Settings created with explicit values."""
        assert mock_settings.formula_strategy == "hybrid"
        assert mock_settings.max_nesting_depth == 64
        assert mock_settings.max_formula_length == 10000
        assert mock_settings.log_level == "DEBUG"
        assert mock_settings.port == 8000
        assert mock_settings.debug is False

    def test_settings_override(self):
        """Test overriding individual settings."""
        settings = Settings(formula_strategy="omit", max_nesting_depth=8, debug=True)

        assert settings.formula_strategy == "omit"
        assert settings.max_nesting_depth == 8
        assert settings.debug is True

    def test_settings_cors_origins(self):
        """Test CORS origins are stored as given."""
        settings = Settings(cors_allow_origins=["http://localhost:3000", "http://example.com"])

        assert settings.cors_allow_origins == ["http://localhost:3000", "http://example.com"]
