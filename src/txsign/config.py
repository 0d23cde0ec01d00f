"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="127.0.0.1", description="API server host")
    api_port: int = Field(default=1317, description="API server port")
    max_body_bytes: int = Field(
        default=1024 * 1024, description="Largest sign request body accepted"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Keybase
    # ======================
    key_dir: Path = Field(
        default=Path("./data/keys"), description="Directory holding encrypted key files"
    )
    kdf_iterations: int = Field(
        default=100000, description="PBKDF2 iterations used to derive key encryption keys"
    )
    bech32_prefix: str = Field(default="cosmos", description="Account address prefix")
    signer_backend: str = Field(default="keybase", description="Signer backend: keybase or memory")

    # ======================
    # Wire format
    # ======================
    tx_type: str = Field(default="auth/StdTx", description="Amino type tag of a transaction")
    pub_key_type: str = Field(
        default="tendermint/PubKeySecp256k1", description="Amino type tag of a public key"
    )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "max_body_bytes": self.max_body_bytes,
            "keybase": {
                "key_dir": str(self.key_dir),
                "bech32_prefix": self.bech32_prefix,
            },
            "wire": {
                "tx_type": self.tx_type,
                "pub_key_type": self.pub_key_type,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
