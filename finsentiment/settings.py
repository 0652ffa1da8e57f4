from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from finsentiment.sentiment_model import SentimentModelConfig


class EngineSettings(BaseSettings):
    """
    Environment-driven settings for the sentiment engine.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # "bilstm" (built-in hash-vocabulary network) or "finbert" (pretrained transformer)
    sentiment_backend: str = Field(default="bilstm", alias="FINSENT_BACKEND")
    # Hugging Face model id or local directory, finbert backend only
    sentiment_model_path: str = Field(default="ProsusAI/finbert", alias="FINSENT_MODEL_PATH")
    sentiment_model_version: str = Field(default="finsent-bilstm-v1", alias="FINSENT_MODEL_VERSION")

    vocab_size: int = Field(default=50000, alias="FINSENT_VOCAB_SIZE")
    max_sequence_length: int = Field(default=512, alias="FINSENT_MAX_SEQUENCE_LENGTH")
    embedding_dim: int = Field(default=128, alias="FINSENT_EMBEDDING_DIM")
    seed: int = Field(default=42, alias="FINSENT_SEED")

    # Trained weights for the bilstm backend; random seeded weights when unset
    checkpoint_path: Optional[str] = Field(default=None, alias="FINSENT_CHECKPOINT_PATH")

    # Device: "auto" | "cpu" | "cuda"
    device: str = Field(default="cpu", alias="FINSENT_DEVICE")

    # Reported by get_service_stats(), not measured at runtime
    accuracy: float = Field(default=0.925, alias="FINSENT_ACCURACY")

    log_level: str = Field(default="INFO", alias="FINSENT_LOG_LEVEL")

    def to_model_config(self) -> SentimentModelConfig:
        return SentimentModelConfig(
            backend=self.sentiment_backend,
            model_path=self.sentiment_model_path,
            model_version=self.sentiment_model_version,
            vocab_size=self.vocab_size,
            max_sequence_length=self.max_sequence_length,
            embedding_dim=self.embedding_dim,
            seed=self.seed,
            checkpoint_path=self.checkpoint_path,
            device=self.device,
            accuracy=self.accuracy,
        )


def load_settings() -> EngineSettings:
    return EngineSettings()
