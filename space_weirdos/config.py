import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent

DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
DATA_DIR.mkdir(exist_ok=True)

DB_URL = os.getenv("DB_URL", f"sqlite:///./{DATA_DIR.as_posix()}/weirdos.db")
DEBUG = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}


def _path_from_env(env_key: str, default: Path) -> Path:
    raw_value = os.getenv(env_key)
    if not raw_value:
        return default
    return Path(raw_value).expanduser()


RULESET_PATH = _path_from_env("RULESET_PATH", PACKAGE_DIR / "rulesets" / "default.json")
