from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables.

    Every field can be overridden with a SHIPKIT_-prefixed variable, e.g.
    SHIPKIT_CONTAINER_RUNTIME=podman. A local .env file is honoured.

    Credential fields hold the *names* of the environment variables that
    carry the secret values, never the values themselves. Values are read
    lazily through `shipkit.core.secrets.Secret` when a module needs them.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIPKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Container runtime binary (any docker-CLI compatible binary)
    container_runtime: str = "docker"

    # Images for the wrapped CLIs
    aws_cli_image: str = "amazon/aws-cli:latest"
    alpine_image: str = "alpine:latest"
    golangci_lint_image: str = "golangci/golangci-lint:v2.8.0"

    # Env var names holding bucket credentials
    bucket_endpoint_env: str = "BUCKET_ENDPOINT"
    bucket_name_env: str = "BUCKET_NAME"
    bucket_access_key_id_env: str = "BUCKET_ACCESS_KEY_ID"
    bucket_secret_access_key_env: str = "BUCKET_SECRET_ACCESS_KEY"

    # Env var name holding the GitHub token
    github_token_env: str = "GITHUB_TOKEN"
    github_api_base: str = "https://api.github.com"
    github_uploads_base: str = "https://uploads.github.com"

    # Debug selects the console renderer, otherwise JSON lines.
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        return str(v).strip().upper()


def get_settings() -> Settings:
    return Settings()
