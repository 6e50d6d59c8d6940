# lighter/config.py
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "sanitize_all": False,
    "check_in_dom": False,
    "replace_root": True,
    "default_tag": "div",
    "log_level": "WARNING",
}


class Config:
    """
    Singleton config loader for engine defaults.

    Sources, in order of preference:
      - an embedded config module (default name: _embedded_lighter_config, attribute: CONFIG)
      - a YAML file (default: lighter.yaml)

    Missing keys fall back to ``DEFAULTS``.

    Usage:
        cfg = Config()
        cfg.get("replace_root")     # True unless overridden
        cfg.reload()                # re-read embedded/file
    """

    _instance: Optional["Config"] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(
        self,
        config_file: str = "lighter.yaml",
        prefer_embedded: bool = True,
        embedded_module_name: str = "_embedded_lighter_config",
    ):
        if getattr(self, "_initialized", False):
            return

        self._initialized = True
        self.config_file_arg = config_file
        self.prefer_embedded = bool(prefer_embedded)
        self.embedded_module_name = embedded_module_name

        self._config: Dict[str, Any] = {}
        self._source: Optional[str] = None  # 'embedded' or 'file' or None
        self._resolved_config_path: Optional[Path] = self._resolve_config_path(config_file)

        self.reload()

    @classmethod
    def discard(cls) -> None:
        """Forget the shared instance so the next ``Config()`` loads afresh."""
        cls._instance = None

    # ----- public API -----
    def reload(self, prefer_embedded: Optional[bool] = None) -> None:
        """Re-read the configuration, optionally overriding the source preference."""
        prefer = self.prefer_embedded if prefer_embedded is None else bool(prefer_embedded)

        if prefer:
            loaded = self._try_load_embedded() or self._try_load_file()
        else:
            loaded = self._try_load_file() or self._try_load_embedded()

        if not loaded:
            self._source = None
            self._config = {}
        logger.debug("Config loaded from %s: keys=%s", self._source, sorted(self._config))

    def as_dict(self) -> Dict[str, Any]:
        """Configuration merged over the defaults."""
        merged = dict(DEFAULTS)
        merged.update(self._config)
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._config:
            return self._config[key]
        if default is None:
            return DEFAULTS.get(key)
        return default

    @property
    def source(self) -> Optional[str]:
        """'embedded', 'file' or None depending on where config came from."""
        return self._source

    @property
    def resolved_config_path(self) -> Optional[Path]:
        return self._resolved_config_path

    # ----- internal helpers -----
    def _resolve_config_path(self, config_file: str) -> Optional[Path]:
        """
        Resolve the YAML path:
          1. config_file itself when absolute and existing
          2. relative to the project root (parent of this package)
          3. relative to the current working directory
        """
        candidate = Path(config_file)
        if candidate.is_absolute():
            return candidate.resolve() if candidate.exists() else None

        project_root = Path(__file__).resolve().parent.parent
        for base in (project_root, Path.cwd()):
            path = (base / config_file).resolve()
            if path.exists():
                return path
        return None

    def _try_load_embedded(self) -> bool:
        try:
            module = importlib.import_module(self.embedded_module_name)
        except ModuleNotFoundError:
            return False
        cfg = getattr(module, "CONFIG", None)
        if not isinstance(cfg, Mapping):
            logger.warning("Embedded config %s has no CONFIG mapping; ignoring it", self.embedded_module_name)
            return False
        self._config = dict(cfg)
        self._source = "embedded"
        return True

    def _try_load_file(self) -> bool:
        if not self._resolved_config_path:
            return False
        with self._resolved_config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"{self._resolved_config_path} must contain a mapping at the top level")
        self._config = data
        self._source = "file"
        return True


def get_config(*args, **kwargs) -> Config:
    """Returns the shared Config; arguments are used only on the first call."""
    return Config(*args, **kwargs)


@dataclass
class Settings:
    """
    Process-wide engine settings.

    :param sanitizer: Function applied to raw markup before it is parsed.
    :param sanitize_all: Sanitize every node's markup, not only nodes with ``sanitize``.
    :param check_in_dom: Skip focus/scroll operations on nodes not attached to the document.
    :param replace_root: Root nodes replace their attach target instead of being appended to it.
    """
    sanitizer: Optional[Callable[[str], str]] = None
    sanitize_all: bool = False
    check_in_dom: bool = False
    replace_root: bool = True
    default_tag: str = "div"

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "Settings":
        values = (config or get_config()).as_dict()
        return cls(
            sanitize_all=bool(values["sanitize_all"]),
            check_in_dom=bool(values["check_in_dom"]),
            replace_root=bool(values["replace_root"]),
            default_tag=str(values["default_tag"]),
        )

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "Settings":
        """A copy with the non-``None`` entries of ``overrides`` applied."""
        if not overrides:
            return replace(self)
        known = {k: v for k, v in overrides.items() if k in self.__dataclass_fields__ and v is not None}
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))
        return replace(self, **known)
