from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import sys
from urllib.parse import urlparse


class ConfigurationError(ValueError):
    pass


DEFAULT_RPC_URL = "https://rpc.testnet.near.org"
DEFAULT_WALLET_URL = "https://wallet.testnet.near.org/login/"
DEFAULT_CONTRACT_ID = "example-contract.testnet"
DEFAULT_SUCCESS_URL = "myapp://callback"
DEFAULT_FAILURE_URL = "myapp://callback?error=true"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppSettings:
    rpc_url: str = DEFAULT_RPC_URL
    timeout_seconds: float = 30
    wallet_url: str = DEFAULT_WALLET_URL
    contract_id: str = DEFAULT_CONTRACT_ID
    success_url: str = DEFAULT_SUCCESS_URL
    failure_url: str = DEFAULT_FAILURE_URL
    max_workers: int = 4
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        rpc_url = os.getenv("NEAR_RPC_URL", DEFAULT_RPC_URL).strip()
        wallet_url = os.getenv("NEAR_WALLET_URL", DEFAULT_WALLET_URL).strip()
        contract_id = os.getenv("NEAR_CONTRACT_ID", DEFAULT_CONTRACT_ID).strip()
        success_url = os.getenv("NEAR_SUCCESS_URL", DEFAULT_SUCCESS_URL).strip()
        failure_url = os.getenv("NEAR_FAILURE_URL", DEFAULT_FAILURE_URL).strip()

        timeout_seconds = _parse_number("NEAR_TIMEOUT_SECONDS", "30", float)
        max_workers = _parse_number("NEAR_MAX_WORKERS", "4", int)
        log_level = os.getenv("NEAR_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            rpc_url=rpc_url,
            timeout_seconds=timeout_seconds,
            wallet_url=wallet_url,
            contract_id=contract_id,
            success_url=success_url,
            failure_url=failure_url,
            max_workers=max_workers,
            log_level=log_level,
        )
        settings.validate()
        return settings

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)

    def validate(self) -> None:
        url_fields = {
            "NEAR_RPC_URL": self.rpc_url,
            "NEAR_WALLET_URL": self.wallet_url,
        }
        invalid_urls = [
            name
            for name, value in url_fields.items()
            if urlparse(value).scheme not in ("http", "https") or not urlparse(value).netloc
        ]
        if invalid_urls:
            raise ConfigurationError(
                "URLs must be absolute http(s) URLs: " + ", ".join(invalid_urls)
            )

        missing = []
        if not self.contract_id:
            missing.append("NEAR_CONTRACT_ID")
        if not self.success_url:
            missing.append("NEAR_SUCCESS_URL")
        if not self.failure_url:
            missing.append("NEAR_FAILURE_URL")
        if missing:
            raise ConfigurationError(
                "Missing required settings: " + ", ".join(missing)
            )

        if self.timeout_seconds <= 0:
            raise ConfigurationError("NEAR_TIMEOUT_SECONDS must be greater than 0")

        if self.max_workers <= 0:
            raise ConfigurationError("NEAR_MAX_WORKERS must be greater than 0")

        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                "NEAR_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS))
            )


def _parse_number(name: str, default: str, kind):
    raw = os.getenv(name, default).strip()
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _load_dotenv_if_present(file_name: str = ".env") -> None:
    for candidate in _candidate_env_files(file_name):
        _load_env_file(candidate)


def _candidate_env_files(file_name: str) -> list[Path]:
    candidates: list[Path] = []

    explicit = os.getenv("NEAR_ENV_FILE", "").strip()
    if explicit:
        candidates.append(Path(explicit).expanduser())

    candidates.append(Path.cwd() / file_name)

    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        candidates.append(exe_dir / file_name)
    else:
        project_root = Path(__file__).resolve().parent.parent
        candidates.append(project_root / file_name)

    unique_candidates: list[Path] = []
    seen: set[str] = set()
    for path in candidates:
        normalized = str(path.resolve()) if path.exists() else str(path)
        if normalized in seen:
            continue
        seen.add(normalized)
        unique_candidates.append(path)
    return unique_candidates


def _load_env_file(path: Path) -> None:
    if not path.is_file():
        return

    try:
        with path.open("r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")

                if key and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        return
