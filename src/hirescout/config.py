from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "hirescout"
    app_env: str = "development"
    log_level: str = "INFO"

    data_dir: Path = Path("./data")
    jobs_file: Path = Path("./data/jobs.json")
    candidates_file: Path = Path("./data/candidates.json")
    database_url: str = "sqlite:///./data/workflow.db"

    use_elasticsearch: bool = False
    elasticsearch_node: str = "http://localhost:9200"
    elasticsearch_username: str = ""
    elasticsearch_password: str = ""
    elasticsearch_index: str = "candidates"
    elasticsearch_refresh: str = "false"
    elasticsearch_timeout_sec: int = 30

    llm_primary_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout_sec: int = 60

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_timeout_sec: int = 60

    apify_token: str = ""
    apify_base_url: str = "https://api.apify.com/v2"
    apify_linkedin_actor: str = "harvestapi~linkedin-profile-search"
    apify_github_actor: str = "saswave~github-profile-scraper"
    apify_timeout_sec: int = 300
    sourcing_max_items: int = 10
    github_enrichment_enabled: bool = True

    default_location: str = "Remote"
    default_tech_match_weight: float = 0.2
    default_oss_activity_weight: float = 0.5
    default_startup_exp_weight: float = 0.3

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("llm_primary_provider")
    @classmethod
    def validate_primary_provider(cls, value: str) -> str:
        allowed = {"gemini", "openai"}
        if value not in allowed:
            raise ValueError(f"llm_primary_provider must be one of {sorted(allowed)}")
        return value

    @field_validator("elasticsearch_refresh")
    @classmethod
    def validate_refresh(cls, value: str) -> str:
        allowed = {"true", "false", "wait_for"}
        if value not in allowed:
            raise ValueError(f"elasticsearch_refresh must be one of {sorted(allowed)}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
