import os
from pathlib import Path
from typing import List, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from core.logger import mask_secret

ENV_CLIENT_ID = "CLIENT_ID"
ENV_API_KEY = "API_KEY"
ENV_SECRET_KEY = "SECRET_KEY"
ENV_BASE_URL = "FIRI_BASE_URL"


class ConfigurationError(RuntimeError):
    pass


class ApiKeys(BaseModel):
    client_id: str = ""
    api_key: str = ""
    secret_key: str = ""

    def masked(self) -> "ApiKeys":
        return ApiKeys(
            client_id=self.client_id,
            api_key=mask_secret(self.api_key),
            secret_key=mask_secret(self.secret_key),
        )

    def missing(self) -> List[str]:
        required = {
            ENV_CLIENT_ID: self.client_id,
            ENV_API_KEY: self.api_key,
            ENV_SECRET_KEY: self.secret_key,
        }
        return [name for name, value in required.items() if not value]


class AppSettings(BaseModel):
    base_url: str = "https://api.miraiex.com"
    timeout_seconds: float = 5.0
    log_level: str = "INFO"
    log_path: Optional[str] = "logs/firi.log"
    send_access_key: bool = True


class Config(BaseModel):
    app: AppSettings = AppSettings()
    api_keys: ApiKeys = ApiKeys()


class ConfigService:
    """Loads settings from YAML, then lets the environment override credentials."""

    def __init__(self, default_path: Path = Path("config/config.yaml")) -> None:
        self.default_path = default_path
        self.config = Config()

    def load(self, path: Optional[Path] = None) -> Config:
        path = path or self.default_path
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}

        try:
            self.config = Config(**data)
            return self.config
        except (TypeError, ValidationError) as exc:
            raise ValueError(f"Config validation error: {exc}") from exc

    def load_env(self, environ: Optional[Mapping[str, str]] = None) -> Config:
        environ = os.environ if environ is None else environ
        keys = self.config.api_keys
        updates = {
            "client_id": environ.get(ENV_CLIENT_ID, "").strip() or keys.client_id,
            "api_key": environ.get(ENV_API_KEY, "").strip() or keys.api_key,
            "secret_key": environ.get(ENV_SECRET_KEY, "").strip() or keys.secret_key,
        }
        app = self.config.app
        base_url = environ.get(ENV_BASE_URL, "").strip()
        if base_url:
            app = app.model_copy(update={"base_url": base_url})
        self.config = Config(app=app, api_keys=ApiKeys(**updates))
        return self.config

    def require_api_keys(self) -> ApiKeys:
        missing = self.config.api_keys.missing()
        if missing:
            raise ConfigurationError(f"Missing required credentials. Set {', '.join(missing)} in environment.")
        return self.config.api_keys
