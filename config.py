"""Tagtree settings.

Settings live in a TOML file (``~/.config/tagtree.toml`` unless a path is
given). A first run writes the file with every default filled in, so users
have something to edit. Sections:

    base_dir          root for the database and logs
    [database]        data_dir, filename
    [logging]         level, log_dir
    [user]            id the categories and transactions are scoped to
    [report]          default_mode, "income" or "expense"
"""

from pathlib import Path
from dataclasses import dataclass
import tomllib
import tomli_w

DEFAULT_USER_ID = "demo-user"
DEFAULT_MODE = "expense"
MODES = ("income", "expense")


@dataclass
class Config:
    """Resolved settings for one run."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    user_id: str = DEFAULT_USER_ID
    default_mode: str = DEFAULT_MODE

    @property
    def db_path(self) -> Path:
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Settings for a fresh install, everything under ~/data/tagtree."""
        return cls.from_toml({})

    @classmethod
    def from_toml(cls, data: dict) -> "Config":
        """Build settings from a parsed TOML document.

        Paths inside a section fall back to locations under ``base_dir``, so
        moving ``base_dir`` alone moves everything.

        Raises:
            ValueError: If ``report.default_mode`` is not income or expense.
        """
        base_dir = Path(data.get("base_dir", Path.home() / "data" / "tagtree"))
        database = data.get("database", {})
        logging_section = data.get("logging", {})

        default_mode = data.get("report", {}).get("default_mode", DEFAULT_MODE)
        if default_mode not in MODES:
            raise ValueError(
                f"report.default_mode must be one of {', '.join(MODES)}, got {default_mode!r}"
            )

        return cls(
            base_dir=base_dir,
            db_data_dir=Path(database.get("data_dir", base_dir / "db")),
            db_filename=database.get("filename", "tagtree.db"),
            log_level=logging_section.get("level", "INFO"),
            log_dir=Path(logging_section.get("log_dir", base_dir / "logs")),
            user_id=data.get("user", {}).get("id", DEFAULT_USER_ID),
            default_mode=default_mode,
        )

    def to_toml(self) -> dict:
        """Inverse of ``from_toml``."""
        return {
            "base_dir": str(self.base_dir),
            "database": {
                "data_dir": str(self.db_data_dir),
                "filename": self.db_filename,
            },
            "logging": {
                "level": self.log_level,
                "log_dir": str(self.log_dir),
            },
            "user": {"id": self.user_id},
            "report": {"default_mode": self.default_mode},
        }


def get_config_path() -> Path:
    return Path.home() / ".config" / "tagtree.toml"


def get_migrations_dir() -> Path:
    """SQL migrations ship next to the code and are not configurable."""
    return Path(__file__).parent / "db" / "migrations"


def get_seed_file() -> Path:
    """Default category hierarchy used by ``categories seed``."""
    return Path(__file__).parent / "db" / "seed" / "categories.json"


def load_config(config_path: Path | None = None) -> Config:
    """Read the settings file, writing a default one on first run.

    Args:
        config_path: Settings file to use instead of ~/.config/tagtree.toml.

    Returns:
        Config with every missing key filled from the defaults.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
        return config

    with open(config_path, "rb") as f:
        return Config.from_toml(tomllib.load(f))


def _write_config(config: Config, config_path: Path) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(config.to_toml(), f)
