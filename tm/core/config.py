import json
from tm.common.logger import log
from tm.common.setup import PATHS

#region === Helpers and Paths ===

STATE_PATH = PATHS.current / "state.json"

STOPWATCH_KEY = "stopwatch"
TIMER_KEY = "timer"
DARK_MODE_KEY = "darkMode"

#endregion === Helpers and Paths ===

#region === Durable Store ===

# A string-keyed, string-valued store kept as one JSON object on disk. Every set() rewrites the file synchronously.
# Values are opaque strings to the store, callers own their own serialization.
class JsonStore:

    def __init__(self, path=None):
        self.path = path or STATE_PATH
        self._data = self._load()

    # Reads the whole store once. A missing file is a fresh start, anything unreadable is treated the same way.
    def _load(self):
        try:
            if not self.path.exists():
                log.info(f"No existing store found at '{self.path}', starting with an empty store.")
                return {}
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                log.warning(f"Store at '{self.path}' is not a JSON object, starting with an empty store.")
                return {}
            dropped = sorted(k for k, v in data.items() if not isinstance(v, str))
            if dropped:
                log.warning(f"Dropped non-string values from store: {', '.join(dropped)}")
            log.info(f"Successfully loaded store from '{self.path}'.")
            return {k: v for k, v in data.items() if isinstance(v, str)}
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            log.warning(f"Ran into an error while trying to load '{self.path}', starting with an empty store.", exc_info=True)
            return {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = str(value)
        self._save()

    def remove(self, key):
        if self._data.pop(key, None) is not None:
            self._save()

    # Best-effort write. A failed write is logged and skipped, the in-memory copy stays authoritative.
    def _save(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
        except OSError:
            log.warning(f"Failed to write store to '{self.path}', skipping this write.", exc_info=True)

#endregion === Durable Store ===

#region === Settings ===

def load_dark_mode(store):
    raw = store.get(DARK_MODE_KEY)
    if raw is None:
        return False
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        log.warning(f"Ignoring malformed '{DARK_MODE_KEY}' value {raw!r}")
        return False
    return value if isinstance(value, bool) else False

def save_dark_mode(store, enabled):
    store.set(DARK_MODE_KEY, json.dumps(bool(enabled)))

#endregion === Settings ===
