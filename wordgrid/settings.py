import os
from dataclasses import dataclass, field
from pathlib import Path

TIMER_NAMES = ("classic", "refill", "stamina", "strikeout", "allotment", "discovery")


@dataclass
class Settings:
    BASE_DIR: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    DATA_DIR: Path = field(init=False)
    DICE_PATH: Path = field(init=False)
    WORDS_PATH: Path = field(init=False)
    CACHE_DIR: Path = field(init=False)

    BOARD_SIZE: int = 4
    MIN_WORD_LENGTH: int = 3
    DENSITY: int = 1
    TIMER: str = "classic"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    def __post_init__(self):
        self.DATA_DIR = self.BASE_DIR / "data" / "en"
        self.DICE_PATH = self.DATA_DIR / "dice.txt"
        self.WORDS_PATH = self.DATA_DIR / "words.txt"
        self.CACHE_DIR = Path.home() / ".cache" / "wordgrid"

        # Override from environment
        for fld in self.__dataclass_fields__:
            env_val = os.environ.get(fld)
            if env_val is not None:
                current = getattr(self, fld)
                if isinstance(current, bool):
                    setattr(self, fld, env_val.lower() in ("1", "true", "yes"))
                elif isinstance(current, int):
                    setattr(self, fld, int(env_val))
                elif isinstance(current, float):
                    setattr(self, fld, float(env_val))
                elif isinstance(current, Path):
                    setattr(self, fld, Path(env_val))
                else:
                    setattr(self, fld, env_val)


# Fields that may be changed at runtime, with their types
EDITABLE_FIELDS = {
    "BOARD_SIZE": int,
    "MIN_WORD_LENGTH": int,
    "DENSITY": int,
    "TIMER": str,
    "LOG_LEVEL": str,
    "DEBUG": bool,
}

_CHOICES = {
    "BOARD_SIZE": (4, 5),
    "MIN_WORD_LENGTH": tuple(range(3, 8)),
    "DENSITY": (0, 1, 2, 3),
    "TIMER": TIMER_NAMES,
    "LOG_LEVEL": ("DEBUG", "INFO", "WARNING", "ERROR"),
}


def log_level(cfg: Settings) -> str:
    """DEBUG forces debug logging regardless of LOG_LEVEL."""
    return "DEBUG" if cfg.DEBUG else cfg.LOG_LEVEL


def get_editable_settings(cfg: Settings) -> dict:
    return {name: getattr(cfg, name) for name in EDITABLE_FIELDS}


def _coerce(value, kind):
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        raise ValueError(f"expected bool, got {value!r}")
    if kind is int and isinstance(value, bool):
        raise ValueError(f"expected int, got {value!r}")
    return kind(value)


def update_settings(cfg: Settings, **values) -> dict[str, str]:
    """Apply ``values`` to ``cfg``; returns field -> error for anything rejected.

    Valid fields are applied even when others in the same call fail.
    """
    errors: dict[str, str] = {}
    for name, raw in values.items():
        kind = EDITABLE_FIELDS.get(name)
        if kind is None:
            errors[name] = "not an editable setting" if hasattr(cfg, name) else "unknown setting"
            continue
        try:
            value = _coerce(raw, kind)
        except (TypeError, ValueError) as e:
            errors[name] = str(e)
            continue
        if name == "TIMER":
            value = value.lower()
        elif name == "LOG_LEVEL":
            value = value.upper()
        choices = _CHOICES.get(name)
        if choices is not None and value not in choices:
            errors[name] = f"must be one of {', '.join(str(c) for c in choices)}"
            continue
        setattr(cfg, name, value)
    return errors


settings = Settings()
