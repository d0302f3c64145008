from shipkit.core.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SHIPKIT_CONTAINER_RUNTIME", raising=False)
        settings = Settings(_env_file=None)
        assert settings.container_runtime == "docker"
        assert settings.aws_cli_image == "amazon/aws-cli:latest"
        assert settings.golangci_lint_image == "golangci/golangci-lint:v2.8.0"
        assert settings.github_token_env == "GITHUB_TOKEN"

    def test_env_prefix_override(self, monkeypatch):
        monkeypatch.setenv("SHIPKIT_ALPINE_IMAGE", "alpine:3.20")
        monkeypatch.setenv("SHIPKIT_DEBUG", "true")
        settings = get_settings()
        assert settings.alpine_image == "alpine:3.20"
        assert settings.debug is True

    def test_log_level_normalised(self, monkeypatch):
        monkeypatch.setenv("SHIPKIT_LOG_LEVEL", " debug ")
        assert get_settings().log_level == "DEBUG"
