from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    # --- core -----------------------------------------------------------
    project_name: str = "Taxonomy-Scoring-Engine"
    service_name: str = Field("scoring_engine", validation_alias="SERVICE_NAME")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # Optional JSON file overriding the default preference weights
    weights_path: str = Field("", validation_alias="WEIGHTS_PATH")

    # --- scoring --------------------------------------------------------
    # Book-side importance used when a stored assignment has none
    missing_importance: float = Field(0.5, validation_alias="MISSING_IMPORTANCE")
    # Top-K cut-off for view rankings
    default_result_limit: int = Field(150, validation_alias="RESULT_LIMIT")
    # Smallest tag list a book editor may submit
    min_total_tags: int = Field(5, validation_alias="MIN_TOTAL_TAGS")

    # --- observability --------------------------------------------------
    enable_metrics: bool = Field(True, validation_alias="ENABLE_METRICS")


# singleton
SettingsInstance = Settings()
# pep-8 alias
settings = SettingsInstance
