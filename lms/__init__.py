"""District LMS core.

Loads environment variables from a local .env file so the database URL,
seed credentials and SMTP settings can be configured without exporting them.
"""

from pathlib import Path

from dotenv import load_dotenv


def _load_local_env():
    # lms/.env first, then the project root .env
    pkg_dir = Path(__file__).resolve().parent
    candidates = [
        pkg_dir / ".env",
        pkg_dir.parent / ".env",
    ]
    for p in candidates:
        if p.exists():
            load_dotenv(dotenv_path=p, override=False)


_load_local_env()
