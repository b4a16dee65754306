from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Class to store all the settings of the application.

    Every value can be overridden through an ``NFL_TREE_``-prefixed environment
    variable or a ``.env`` file, e.g. ``NFL_TREE_MIN_GAIN_RATIO=0.05``.
    """

    MIN_GAIN_RATIO: float = Field(
        default=0.02,
        gt=0.0,
        le=1.0,
        description="Lowest information gain ratio at which a split is kept.",
    )
    SIGNIFICANCE_RATIO: float = Field(
        default=0.75,
        gt=0.0,
        le=1.0,
        description="Fraction of a leaf's top play share a play type needs "
        "to count as significant.",
    )
    LOW_COUNT_THRESHOLD: int = Field(
        default=5,
        ge=0,
        description="If a leaf's most frequent play type has at most this many "
        "plays, every play type in it counts as significant.",
    )
    NOISE_FRACTION: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Largest share of a node's plays that single-play noise "
        "may hold for its children to be merged.",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_prefix="NFL_TREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()  # type: ignore
