"""Runtime settings: storage, API endpoint, limits and vocabularies."""

import os
from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for settings loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field

from proposal_hub.models.vocabulary import Vocabulary

CONFIG_ENV = "PROPOSAL_HUB_CONFIG"


class Settings(BaseModel):
    """Settings shared by the backends, views and CLI."""

    db_path: Path = Path("proposal_hub.db")

    api_base_url: str = "http://localhost:5000/api"
    api_token: Optional[str] = None
    http_timeout: float = 10.0

    match_limit: int = Field(default=5, description="Vendor groups suggested per proposal")
    match_fetch_limit: int = Field(default=20, description="Solutions fetched before grouping")
    compare_limit: int = Field(default=3, description="Responses shown side by side")
    default_expiry_days: int = 30
    fetch_limit: int = 12
    feed_fetch_limit: int = Field(default=50, description="Proposals loaded by each role feed")

    log_level: str = "INFO"

    vocabulary: Vocabulary = Field(default_factory=Vocabulary)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML. Supports nested (api/limits/vocabulary) or flat structure."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        api = data.get("api", {})
        limits = data.get("limits", {})
        vocab = data.get("vocabulary", {})

        def _get(key: str, nested: dict, default=None):
            return nested.get(key, data.get(key, default))

        flat: dict = {}
        for key in ("db_path", "log_level"):
            if key in data:
                flat[key] = data[key]
        for key, nested_key in (
            ("api_base_url", "base_url"),
            ("api_token", "token"),
            ("http_timeout", "timeout"),
        ):
            value = api.get(nested_key, data.get(key))
            if value is not None:
                flat[key] = value
        for key in (
            "match_limit",
            "match_fetch_limit",
            "compare_limit",
            "default_expiry_days",
            "fetch_limit",
            "feed_fetch_limit",
        ):
            value = _get(key, limits)
            if value is not None:
                flat[key] = value
        vocab_flat = {}
        for key in ("categories", "industries", "data_types", "compliance_options"):
            value = _get(key, vocab)
            if value:
                vocab_flat[key] = [str(v) for v in value]
        flat["vocabulary"] = vocab_flat
        return cls.model_validate(flat)


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """
    Build settings from an optional YAML file (argument or PROPOSAL_HUB_CONFIG),
    then apply PROPOSAL_HUB_DB / PROPOSAL_HUB_API_URL / PROPOSAL_HUB_API_TOKEN.
    """
    path = path or os.environ.get(CONFIG_ENV)
    settings = Settings.from_yaml(path) if path else Settings()

    overrides: dict = {}
    if os.environ.get("PROPOSAL_HUB_DB"):
        overrides["db_path"] = Path(os.environ["PROPOSAL_HUB_DB"])
    if os.environ.get("PROPOSAL_HUB_API_URL"):
        overrides["api_base_url"] = os.environ["PROPOSAL_HUB_API_URL"]
    if os.environ.get("PROPOSAL_HUB_API_TOKEN"):
        overrides["api_token"] = os.environ["PROPOSAL_HUB_API_TOKEN"]
    return settings.model_copy(update=overrides) if overrides else settings
