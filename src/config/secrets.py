"""
Credentials for the optional OpenAI analysis provider.

The heuristic provider needs no secrets. When ``analysis.provider`` is
``openai``, OPENAI_API_KEY must be set in the environment or in a ``.env``
file at the repo root (falling back to the working directory).

Usage:
    from src.config.secrets import get_openai_key

    key = get_openai_key()  # raises MissingAPIKeyError if unset

CLI check against the active config:
    python -m src.config.secrets --check [--config path/to/report.yaml]
"""

import os
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

_repo_root = Path(__file__).resolve().parent.parent.parent  # src/config/secrets.py -> repo root
_env_path = _repo_root / ".env"

if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()

# Secrets each analysis provider needs
PROVIDER_KEYS: Dict[str, tuple] = {
    "heuristic": (),
    "openai": ("OPENAI_API_KEY",),
}


class MissingAPIKeyError(Exception):
    """Raised when the configured analysis provider lacks its API key."""
    pass


def get_openai_key() -> str:
    """
    OpenAI key for OpenAIAnalyzer.

    Raises:
        MissingAPIKeyError: If OPENAI_API_KEY is unset or blank
    """
    key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not key:
        raise MissingAPIKeyError(
            "OPENAI_API_KEY not found. Add it to .env or set analysis.provider to 'heuristic'."
        )
    return key


def check_keys(provider: Optional[str] = None) -> Dict[str, str]:
    """
    Key status ("OK" / "MISSING") for one provider, or for every provider.

    Raises:
        ValueError: for an unknown provider name
    """
    if provider is not None and provider not in PROVIDER_KEYS:
        raise ValueError(f"Unknown analysis provider: {provider}")
    providers = [provider] if provider else list(PROVIDER_KEYS)
    names = sorted({name for p in providers for name in PROVIDER_KEYS[p]})
    return {name: "OK" if os.environ.get(name, "").strip() else "MISSING" for name in names}


def _cli_check(config_path: Optional[str] = None) -> int:
    from src.config.settings import load_config

    provider = load_config(config_path)["analysis"]["provider"]
    status = check_keys(provider)
    print(f"analysis.provider: {provider}")
    if not status:
        print("No API keys required.")
        return 0

    for key_name, key_status in status.items():
        print(f"{key_name}: {key_status}")
    return 1 if "MISSING" in status.values() else 0


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Check API keys for the configured analysis provider")
    parser.add_argument("--check", action="store_true", help="Check key configuration")
    parser.add_argument("--config", default=None, help="Path to config file")
    args = parser.parse_args()

    if args.check:
        sys.exit(_cli_check(args.config))
    parser.print_help()
