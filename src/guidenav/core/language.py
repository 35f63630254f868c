"""Display-language selection and preference persistence.

The selector holds the active language for rendering. It is seeded from a
preference store once and writes back on every explicit change.
"""

import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from guidenav.core.types import LanguageCode

logger = logging.getLogger(__name__)

LanguageListener = Callable[[LanguageCode], None]


class UnsupportedLanguage(ValueError):
    """Requested language is not in the supported allow-list."""

    def __init__(self, code: str, supported: Iterable[str]) -> None:
        self.code = code
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported language: {code!r} (supported: {', '.join(self.supported)})",
        )


class PreferenceStore(Protocol):
    """Durable storage for the preferred language code."""

    def load(self) -> str | None: ...

    def save(self, code: str) -> None: ...


class MemoryPreferenceStore:
    """Preference store kept in memory."""

    def __init__(self, code: str | None = None) -> None:
        self.code = code

    def load(self) -> str | None:
        return self.code

    def save(self, code: str) -> None:
        self.code = code


class FilePreferenceStore:
    """Preference store backed by a JSON file.

    Layout:
        .guidenav/
        ├── .gitignore
        └── preferences.json     # {"language": "zh-CN"}
    """

    FILENAME = "preferences.json"
    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = state_dir

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    @property
    def path(self) -> Path:
        return self._state_dir / self.FILENAME

    def load(self) -> str | None:
        """Read the stored language code.

        Returns:
            Stored code, or None if nothing usable is stored
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return None

        code = data.get("language") if isinstance(data, dict) else None
        if not isinstance(code, str) or not code:
            logger.warning(f"Ignoring invalid language preference in {self.path}")
            return None
        return code

    def save(self, code: str) -> None:
        """Write the language code, creating the state directory if needed."""
        self._ensure_state_dir()
        self.path.write_text(json.dumps({"language": code}), encoding="utf-8")
        logger.debug(f"Saved language preference {code} to {self.path}")

    def _ensure_state_dir(self) -> None:
        self._state_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self._state_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(self._GITIGNORE_CONTENT)


class LanguageSelector:
    """Active display language with an allow-list of supported codes.

    Codes are matched case-insensitively and stored in their canonical
    spelling from the allow-list.
    """

    def __init__(
        self,
        supported: Iterable[str],
        default: str,
        store: PreferenceStore | None = None,
    ) -> None:
        """Initialize selector from the stored preference.

        Args:
            supported: Allow-list of language codes
            default: Fallback language; added to the allow-list if absent
            store: Preference store, in-memory if omitted

        A stored code that is no longer supported is ignored.
        """
        codes = [LanguageCode(code) for code in supported]
        if default not in codes:
            codes.insert(0, LanguageCode(default))
        self._supported: tuple[LanguageCode, ...] = tuple(dict.fromkeys(codes))
        self._by_lower = {code.lower(): code for code in self._supported}
        self._default = LanguageCode(default)
        self._store: PreferenceStore = store if store is not None else MemoryPreferenceStore()
        self._listeners: list[LanguageListener] = []

        self._current = self._default
        stored = self._store.load()
        if stored is not None:
            canonical = self._canonical(stored)
            if canonical is None:
                logger.warning(
                    f"Stored language {stored!r} is not supported, using {self._default}",
                )
            else:
                self._current = canonical

    @property
    def default(self) -> LanguageCode:
        return self._default

    @property
    def supported(self) -> tuple[LanguageCode, ...]:
        return self._supported

    def current(self) -> LanguageCode:
        """Return the active language code."""
        return self._current

    def is_supported(self, code: str) -> bool:
        return self._canonical(code) is not None

    def set_current(self, code: str) -> LanguageCode:
        """Change and persist the active language, then notify listeners.

        Args:
            code: Requested language code

        Returns:
            Canonical spelling of the code now active

        Raises:
            UnsupportedLanguage: If the code is not in the allow-list; the
                active language is left unchanged
        """
        canonical = self._canonical(code)
        if canonical is None:
            raise UnsupportedLanguage(code, self._supported)

        self._store.save(canonical)
        self._current = canonical
        logger.info(f"Display language set to {canonical}")
        for listener in list(self._listeners):
            listener(canonical)
        return canonical

    def add_listener(self, listener: LanguageListener) -> None:
        """Register a callback fired after each language change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: LanguageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _canonical(self, code: str) -> LanguageCode | None:
        return self._by_lower.get(code.strip().lower())
