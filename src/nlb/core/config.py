"""Configuración del cliente.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Las funciones de librería reciben base URL y token explícitos; estos valores
  solo alimentan el cliente HTTP por defecto y los valores por defecto de la CLI.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import set_key
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typer import get_app_dir

APP_NAME = "nlb"


def get_user_env_file() -> Path:
    """`.env` por usuario, dentro del directorio de configuración de la plataforma."""

    return Path(get_app_dir(APP_NAME)) / ".env"


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza claves en el `.env` de usuario; `None` deja la clave intacta."""

    env_path = env_path or get_user_env_file()
    if not env_path.exists():
        env_path.parent.mkdir(parents=True, exist_ok=True)
        env_path.write_text(f"# {APP_NAME} user config (.env)\n", encoding="utf-8")

    for key, value in values.items():
        if value is not None:
            set_key(env_path, key, value, quote_mode="never")
    return env_path


class ClientSettings(BaseSettings):
    """Configuración central del cliente del API de balanceadores."""

    model_config = SettingsConfigDict(
        env_prefix="NLB_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="http://localhost:8080",
        min_length=1,
        description="URL base del API de control del balanceador.",
    )
    token: str | None = Field(
        default=None,
        description="Bearer token para autenticar contra el API.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="nlb-client/0.1",
        min_length=1,
        description="User-Agent enviado al API.",
    )
