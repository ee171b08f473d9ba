"""
Global application settings and preferences.
Uses JSON file for persistent storage across sessions.

Includes:
- Display processing defaults (AGC, trace order)
- Window cache limits
- Parser chunk size
- Recent files
"""
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

# Set up module logger
logger = logging.getLogger(__name__)


def _as_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    return str(value).lower() in ('true', '1', 'yes')


class AppSettings:
    """
    Singleton class for managing global application settings.

    Settings include:
    - AGC enabled flag and window length (ms)
    - Reverse trace display order
    - Window cache size limits and recompute margin
    - Traces decoded per parser chunk
    - Recent files

    Settings are automatically persisted to a JSON file (~/.segyview/settings.json).
    """

    _instance: Optional['AppSettings'] = None

    # Settings file location
    SETTINGS_DIR = Path.home() / '.segyview'
    SETTINGS_FILE = SETTINGS_DIR / 'settings.json'

    def __new__(cls):
        """Singleton pattern - only one instance exists."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize settings (only once due to singleton)."""
        if self._initialized:
            return

        # Default values
        self._defaults = {
            'agc_enabled': False,
            'agc_window_ms': 500.0,
            'reverse_order': False,
            'window_cache_max_windows': 5,
            'window_cache_max_memory_mb': 500.0,
            'window_margin_traces': 0,
            'parse_chunk_size': 10000,
            'recent_files': [],
            'max_recent_files': 10,
        }

        # Current settings (loaded from file or defaults)
        self._settings: Dict[str, Any] = {}

        self._ensure_settings_dir()
        self._load_settings()

        self._initialized = True
        logger.info(f"AppSettings initialized from {self.SETTINGS_FILE}")

    def _ensure_settings_dir(self):
        """Ensure the settings directory exists."""
        try:
            self.SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create settings directory: {e}")

    def _load_settings(self):
        """Load settings from JSON file."""
        if self.SETTINGS_FILE.exists():
            try:
                with open(self.SETTINGS_FILE, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                self._settings = loaded if isinstance(loaded, dict) else {}
                logger.debug(f"Loaded settings from {self.SETTINGS_FILE}")
            except (OSError, ValueError) as e:
                logger.warning(f"Could not load settings file: {e}")
                self._settings = {}
        else:
            self._settings = {}
            logger.debug("No settings file found, using defaults")

    def _save_settings(self):
        """Save settings to JSON file."""
        try:
            self._ensure_settings_dir()
            with open(self.SETTINGS_FILE, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2, default=str)
            logger.debug(f"Saved settings to {self.SETTINGS_FILE}")
        except OSError as e:
            logger.error(f"Could not save settings: {e}")

    def _get(self, key: str, default=None):
        """Get a setting value, falling back to defaults."""
        if default is None:
            default = self._defaults.get(key)
        return self._settings.get(key, default)

    def _set(self, key: str, value: Any, save: bool = True):
        """Set a setting value and optionally save to file."""
        self._settings[key] = value
        if save:
            self._save_settings()

    def _get_int(self, key: str, minimum: int) -> int:
        value = self._get(key)
        try:
            return max(minimum, int(value))
        except (TypeError, ValueError):
            return self._defaults[key]

    def _get_float(self, key: str) -> float:
        value = self._get(key)
        try:
            value = float(value)
        except (TypeError, ValueError):
            return self._defaults[key]
        return value if value > 0 else self._defaults[key]

    def reset_to_defaults(self):
        """Reset all settings to default values."""
        self._settings = {k: (list(v) if isinstance(v, list) else v)
                          for k, v in self._defaults.items()}
        self._save_settings()
        logger.info("Settings reset to defaults")

    # =========================================================================
    # Display Processing
    # =========================================================================

    def get_agc_enabled(self) -> bool:
        """Check if AGC is applied to displayed windows by default."""
        return _as_bool(self._get('agc_enabled'), False)

    def set_agc_enabled(self, enabled: bool) -> None:
        self._set('agc_enabled', bool(enabled))
        logger.info(f"AGC {'enabled' if enabled else 'disabled'}")

    def get_agc_window_ms(self) -> float:
        """Get AGC window length in milliseconds."""
        return self._get_float('agc_window_ms')

    def set_agc_window_ms(self, window_ms: float) -> None:
        """
        Set AGC window length.

        Args:
            window_ms: Window length in milliseconds, must be positive
        """
        if window_ms <= 0:
            raise ValueError(f"AGC window must be positive, got {window_ms}")
        self._set('agc_window_ms', float(window_ms))

    def get_reverse_order(self) -> bool:
        """Check if traces are displayed last-to-first."""
        return _as_bool(self._get('reverse_order'), False)

    def set_reverse_order(self, reverse: bool) -> None:
        self._set('reverse_order', bool(reverse))

    # =========================================================================
    # Cache Settings
    # =========================================================================

    def get_window_cache_max_windows(self) -> int:
        """Get maximum number of processed windows kept in memory."""
        return self._get_int('window_cache_max_windows', 1)

    def set_window_cache_max_windows(self, limit: int) -> None:
        limit = max(1, min(50, int(limit)))
        self._set('window_cache_max_windows', limit)

    def get_window_cache_max_memory_mb(self) -> float:
        """Get memory budget of the processed window cache in MB."""
        return self._get_float('window_cache_max_memory_mb')

    def set_window_cache_max_memory_mb(self, memory_mb: float) -> None:
        if memory_mb <= 0:
            raise ValueError(f"Cache memory limit must be positive, got {memory_mb}")
        self._set('window_cache_max_memory_mb', float(memory_mb))

    def get_window_margin_traces(self) -> int:
        """Get the number of extra traces processed on each side of a window."""
        return self._get_int('window_margin_traces', 0)

    def set_window_margin_traces(self, margin: int) -> None:
        self._set('window_margin_traces', max(0, int(margin)))

    # =========================================================================
    # Parser Settings
    # =========================================================================

    def get_parse_chunk_size(self) -> int:
        """Get number of traces decoded per parser chunk."""
        return self._get_int('parse_chunk_size', 1)

    def set_parse_chunk_size(self, chunk_size: int) -> None:
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be at least 1, got {chunk_size}")
        self._set('parse_chunk_size', int(chunk_size))

    # =========================================================================
    # Recent Files
    # =========================================================================

    def get_recent_files(self) -> list:
        """Get list of recently opened files."""
        recent = self._get('recent_files', [])
        return recent if isinstance(recent, list) else []

    def add_recent_file(self, filepath: str):
        """Add file to recent files list."""
        recent = self.get_recent_files().copy()
        if filepath in recent:
            recent.remove(filepath)
        recent.insert(0, filepath)
        recent = recent[:self.get_max_recent_files()]
        self._set('recent_files', recent)

    def get_max_recent_files(self) -> int:
        """Get maximum number of recent files to store."""
        return self._get_int('max_recent_files', 1)

    def set_max_recent_files(self, count: int) -> None:
        """Set maximum number of recent files."""
        count = max(5, min(50, count))
        self._set('max_recent_files', count)

    def clear_recent_files(self) -> None:
        """Clear the recent files list."""
        self._set('recent_files', [])
        logger.info("Recent files cleared")

    def __repr__(self) -> str:
        return (f"AppSettings(agc_enabled={self.get_agc_enabled()}, "
                f"agc_window_ms={self.get_agc_window_ms()}, "
                f"reverse_order={self.get_reverse_order()})")


# Global singleton instance
def get_settings() -> AppSettings:
    """Get the global settings instance."""
    return AppSettings()
