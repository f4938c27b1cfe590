"""
Configuration settings for the mock interviewer.
All settings can be overridden via environment variables.
"""
import os
from typing import Dict, List, Optional
from dataclasses import dataclass, field


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


def _env_list(name: str) -> List[str]:
    value = os.getenv(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class LLMConfig:
    """Chat-completions server configuration."""
    base_url: str = field(default_factory=lambda: os.getenv("LLM_URL", "http://localhost:9000"))
    completion_endpoint: str = field(
        default_factory=lambda: os.getenv("LLM_COMPLETION_ENDPOINT", "/v1/chat/completions")
    )
    api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    # "bearer" sends Authorization: Bearer, "azure" sends the api-key header
    auth_style: str = field(default_factory=lambda: os.getenv("LLM_AUTH_STYLE", "bearer"))
    model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    timeout: int = 60
    max_retries: int = 3

    # Default generation parameters
    default_temperature: float = 0.7
    default_max_tokens: int = 200

    @property
    def completion_url(self) -> str:
        return f"{self.base_url}{self.completion_endpoint}"


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    pipeline: str = field(default_factory=lambda: os.getenv("INTERVIEW_PIPELINE", "standard"))

    # Per-stage limit overrides, keyed by stage name ("background", "coding", ...)
    stage_limits: Dict[str, int] = field(default_factory=dict)

    # Sample background and coding limits from their bands once per session
    randomize_limits: bool = field(
        default_factory=lambda: os.getenv("RANDOMIZE_STAGE_LIMITS", "false").lower() in ("1", "true", "yes")
    )

    skip_sentinel: str = "Skipped"
    min_answer_length: int = 20  # characters for a "well answered" response

    # Empty means the built-in denylist from interview.topics
    non_coding_topics: List[str] = field(default_factory=lambda: _env_list("NON_CODING_TOPICS"))

    # "three_term" or "two_term"; None picks the blend matching the pipeline
    score_blend: Optional[str] = field(default_factory=lambda: os.getenv("SCORE_BLEND") or None)

    def __post_init__(self):
        for stage in ("background", "knowledge", "mcq", "coding", "scenario", "behavioral"):
            limit = _env_int(f"{stage.upper()}_QUESTIONS")
            if limit is not None:
                self.stage_limits.setdefault(stage, limit)


@dataclass
class ServerConfig:
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS") or ["*"])


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.llm = LLMConfig()
        self.interview = InterviewConfig()
        self.server = ServerConfig()


# Global config instance
config = Config()
