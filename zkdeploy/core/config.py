"""Core configuration for zkdeploy."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Deployment settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ZKDEPLOY_",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # ── Node ─────────────────────────────────────────────────────────────
    chain: str = "besu-dev"
    rpc_url: str = ""  # empty = the chain's default RPC URL
    sender_address: str = ""
    private_key: str = ""  # optional, signs locally instead of using node accounts

    # ── Transactions ─────────────────────────────────────────────────────
    gas: int = Field(default=6_721_975, ge=21_000)
    gas_price: int = Field(default=0, ge=0)

    # ── Artifacts ────────────────────────────────────────────────────────
    artifacts_dir: str = "build/contracts"
    artifacts_url: str = ""  # takes precedence over artifacts_dir when set

    # ── Deployment ───────────────────────────────────────────────────────
    deploy_fail_fast: bool = False
    deployment_output: str = "deployment.json"

    # ── Proof library ────────────────────────────────────────────────────
    proof_library: str = ""  # "package.module:attribute"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
