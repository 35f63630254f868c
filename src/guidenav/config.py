"""Configuration management for Guidenav.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "guidenav.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Navigation content configuration."""

    toc_file: Path = field(default_factory=lambda: Path("toc.toml"))
    toroot: str = "/"
    title: str = "Dev Guide"


@dataclass
class LanguagesConfig:
    """Display language configuration."""

    default: str = "en"
    supported: list[str] = field(default_factory=lambda: ["en"])

    def allowed(self) -> list[str]:
        """Supported codes with the default language first."""
        codes = [self.default, *self.supported]
        return list(dict.fromkeys(codes))


@dataclass
class PreferencesConfig:
    """Preference persistence configuration."""

    state_dir: Path = field(default_factory=lambda: Path(".guidenav"))


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    content: ContentConfig
    languages: LanguagesConfig
    preferences: PreferencesConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for guidenav.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            languages=LanguagesConfig(),
            preferences=PreferencesConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            languages=cls._parse_languages(data.get("languages")),
            preferences=cls._parse_preferences(data.get("preferences"), config_dir),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)
        """
        if data is None:
            return ContentConfig(toc_file=config_dir / "toc.toml")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        toc_file = data.get("toc_file", "toc.toml")
        if not isinstance(toc_file, str):
            raise ValueError("content.toc_file must be a string")

        toroot = data.get("toroot", "/")
        if not isinstance(toroot, str):
            raise ValueError("content.toroot must be a string")

        title = data.get("title", "Dev Guide")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("content.title must be a non-empty string")

        return ContentConfig(toc_file=config_dir / toc_file, toroot=toroot, title=title)

    @classmethod
    def _parse_languages(cls, data: object) -> LanguagesConfig:
        if data is None:
            return LanguagesConfig()

        if not isinstance(data, dict):
            raise ValueError("languages section must be a dictionary")

        default = data.get("default", "en")
        if not isinstance(default, str) or not default:
            raise ValueError("languages.default must be a non-empty string")

        supported_raw = data.get("supported", [default])
        if not isinstance(supported_raw, list):
            raise ValueError("languages.supported must be a list")
        supported: list[str] = []
        for item in supported_raw:
            if not isinstance(item, str) or not item:
                raise ValueError("languages.supported items must be non-empty strings")
            supported.append(item)

        return LanguagesConfig(default=default, supported=supported)

    @classmethod
    def _parse_preferences(cls, data: object, config_dir: Path) -> PreferencesConfig:
        if data is None:
            return PreferencesConfig(state_dir=config_dir / ".guidenav")

        if not isinstance(data, dict):
            raise ValueError("preferences section must be a dictionary")

        state_dir = data.get("state_dir", ".guidenav")
        if not isinstance(state_dir, str):
            raise ValueError("preferences.state_dir must be a string")

        return PreferencesConfig(state_dir=config_dir / state_dir)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        return LiveReloadConfig(enabled=enabled)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        toc_file: Path | None = None,
        toroot: str | None = None,
        default_language: str | None = None,
        live_reload_enabled: bool | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if toc_file is not None or toroot is not None:
            content = replace(
                self.content,
                toc_file=toc_file if toc_file is not None else self.content.toc_file,
                toroot=toroot if toroot is not None else self.content.toroot,
            )

        languages = self.languages
        if default_language is not None:
            languages = replace(self.languages, default=default_language)

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            server=server,
            content=content,
            languages=languages,
            live_reload=live_reload,
        )
