"""Parser settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParserSettings(BaseSettings):
    """Limits and thresholds used while parsing.

    Every field can be overridden with a ``VNA_`` prefixed environment
    variable, e.g. ``VNA_MAX_INPUT_CHARS=50000``.
    """

    max_input_chars: int = Field(
        default=100_000, gt=0, description="Largest input accepted by a parse call."
    )
    min_tempo: int = 20
    max_tempo: int = 300

    model_config = SettingsConfigDict(
        env_prefix="VNA_",
        extra="ignore",
    )


settings = ParserSettings()
