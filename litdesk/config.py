"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk and the environment.

Values are resolved in three layers, later layers winning:

1. dataclass defaults
2. ``.metadata/llm.yaml``  – backend selection, model names, API key
3. environment variables (``PORT``, ``SQLITE_PATH``, ``OLLAMA_BASE_URL``,
   ``OLLAMA_MODEL``, ``OPENAI_MODEL``, ``OPENAI_API_KEY``, ``USE_OLLAMA``,
   ``CORS_ORIGIN``, ``LITDESK_LOG_LEVEL``, ``LITDESK_AUTO_KEYWORDS``)

On first run a missing ``llm.yaml`` is copied from ``.metadata.example/``.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

LLM_CONFIG_NAME = "llm.yaml"


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


# environment variable -> (Settings field, converter)
_ENV_FIELDS: dict[str, tuple[str, Any]] = {
    "PORT": ("port", int),
    "HOST": ("host", str),
    "SQLITE_PATH": ("db_path", Path),
    "OLLAMA_BASE_URL": ("ollama_base_url", str),
    "OLLAMA_MODEL": ("ollama_model", str),
    "OPENAI_MODEL": ("openai_model", str),
    "OPENAI_API_KEY": ("openai_api_key", str),
    "CORS_ORIGIN": ("cors_origin", str),
    "LITDESK_LOG_LEVEL": ("log_level", str),
    "LITDESK_AUTO_KEYWORDS": ("auto_keywords", _as_bool),
}


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings: a singleton with runtime-mutable fields.

    Usage::

        settings = Settings.load()            # first call → create
        settings = Settings.load()            # later → same object
        settings.update(db_path=Path(...))    # runtime change
        settings = Settings.reload()          # re-read disk + env
    """

    host: str = "127.0.0.1"
    port: int = 5175
    db_path: Path = Path("data.db")
    metadata_dir: Path = Path(".metadata")
    cors_origin: str = "http://localhost:5173"
    log_level: str = "INFO"
    auto_keywords: bool = True

    # LLM backend
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.1"
    openai_model: str = "gpt-4o-mini"
    openai_api_key: Optional[str] = None
    use_ollama: bool = True

    # ── Computed properties ────────────────────────────────────────────

    @property
    def backend_name(self) -> str:
        """``"ollama"`` or ``"openai"``, the backend requests will go to."""
        return "ollama" if self.use_ollama else "openai"

    @property
    def active_model(self) -> str:
        return self.ollama_model if self.use_ollama else self.openai_model

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(db_path=Path("/tmp/test.db"))
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the directory
        holding ``.metadata/`` and the default database (defaults to the
        current working directory).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path.cwd()

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        values: dict[str, Any] = {
            "db_path": base_dir / "data.db",
            "metadata_dir": metadata_dir,
        }
        values.update(_load_llm_config(metadata_dir / LLM_CONFIG_NAME))
        values.update(_load_env(os.environ))

        explicit_ollama = values.pop("use_ollama", None)
        env_flag = os.environ.get("USE_OLLAMA")
        if env_flag is not None:
            explicit_ollama = env_flag.strip().lower() == "true"
        # No credential forces the self-hosted backend.
        values["use_ollama"] = bool(explicit_ollama) or not values.get("openai_api_key")

        return cls(**values)

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        metadata_dir.mkdir(parents=True, exist_ok=True)
        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

def _load_llm_config(path: Path) -> dict[str, Any]:
    """Load backend settings from ``llm.yaml``.

    Unknown keys are ignored; a missing or unreadable file yields ``{}``.
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}

    values: dict[str, Any] = {}
    backend = data.get("backend")
    if backend in ("ollama", "openai"):
        values["use_ollama"] = backend == "ollama"
    ollama = data.get("ollama") or {}
    if isinstance(ollama, dict):
        if ollama.get("base_url"):
            values["ollama_base_url"] = str(ollama["base_url"])
        if ollama.get("model"):
            values["ollama_model"] = str(ollama["model"])
    openai_cfg = data.get("openai") or {}
    if isinstance(openai_cfg, dict):
        if openai_cfg.get("model"):
            values["openai_model"] = str(openai_cfg["model"])
        if openai_cfg.get("api_key"):
            values["openai_api_key"] = str(openai_cfg["api_key"])
    return values


def _load_env(environ: Any) -> dict[str, Any]:
    """Pick the recognised variables out of *environ*, converted."""
    values: dict[str, Any] = {}
    for var, (name, convert) in _ENV_FIELDS.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[name] = convert(raw)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", var, raw)
    return values


def save_llm_config(path: Path, settings: Settings) -> None:
    """Persist the backend section of *settings* to ``llm.yaml``."""
    data: dict[str, Any] = {
        "backend": settings.backend_name,
        "ollama": {
            "base_url": settings.ollama_base_url,
            "model": settings.ollama_model,
        },
        "openai": {
            "model": settings.openai_model,
            "api_key": settings.openai_api_key or "",
        },
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# LLM backend settings\n")
        f.write("# backend: ollama (self-hosted) or openai (cloud, needs api_key)\n\n")
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
