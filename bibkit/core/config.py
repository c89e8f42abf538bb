"""Pipeline configuration: YAML loader and Pydantic models."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from bibkit.core.taxonomy import Role

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "default.yaml"


# ── Host Lists ───────────────────────────────────────────────────────


_MICROBLOG_HOSTS = ["twitter.com", "x.com", "mastodon.social", "bsky.app", "threads.net"]
_REPOSITORY_HOSTS = ["github.com", "gitlab.com", "bitbucket.org", "codeberg.org", "sr.ht"]
_PATENT_HOSTS = ["patents.google.com", "patentscope.wipo.int", "worldwide.espacenet.com"]
_VIDEO_HOSTS = ["youtube.com", "youtu.be", "vimeo.com", "dailymotion.com"]
_AUDIO_HOSTS = ["soundcloud.com", "bandcamp.com", "open.spotify.com"]


# ── Pipeline Config ──────────────────────────────────────────────────


class PipelineConfig(BaseModel):
    """Tunable inputs of the classifier and role assigner."""

    model_config = ConfigDict(frozen=True)

    microblog_hosts: list[str] = Field(default_factory=lambda: list(_MICROBLOG_HOSTS))
    repository_hosts: list[str] = Field(default_factory=lambda: list(_REPOSITORY_HOSTS))
    patent_hosts: list[str] = Field(default_factory=lambda: list(_PATENT_HOSTS))
    video_hosts: list[str] = Field(default_factory=lambda: list(_VIDEO_HOSTS))
    audio_hosts: list[str] = Field(default_factory=lambda: list(_AUDIO_HOSTS))
    role_phrases: dict[str, Role] = Field(
        default_factory=dict,
        description="Extra context phrase -> role entries, merged over the built-in table",
    )

    @field_validator(
        "microblog_hosts", "repository_hosts", "patent_hosts", "video_hosts", "audio_hosts"
    )
    @classmethod
    def normalize_hosts(cls, v: list[str]) -> list[str]:
        return [h.strip().lower().removeprefix("www.") for h in v if h.strip()]

    @field_validator("role_phrases")
    @classmethod
    def normalize_phrases(cls, v: dict[str, Role]) -> dict[str, Role]:
        return {" ".join(k.lower().split()): role for k, role in v.items()}


# ── Loading ──────────────────────────────────────────────────────────


def load_config(path: str | Path | None = None) -> PipelineConfig:
    """Load a YAML pipeline config from disk and return a validated model.

    With no path, the bundled ``config/default.yaml`` is used when present.
    Keys missing from the file keep their built-in defaults.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return PipelineConfig()
        path = DEFAULT_CONFIG_PATH

    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    config = PipelineConfig.model_validate(raw)
    logger.debug("Loaded pipeline config from %s", path)
    return config
