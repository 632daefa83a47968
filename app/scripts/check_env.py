"""
Check configuration before deploying. Run from project root:
  python -m app.scripts.check_env
  python -m app.scripts.check_env --generate-key
"""
import argparse
import logging
import sys

from pydantic import ValidationError as SettingsValidationError

from app.core.crypto import generate_encryption_key
from app.core.errors import ConfigurationError


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate vault configuration.")
    parser.add_argument(
        "--generate-key",
        action="store_true",
        help="Print a new random ENCRYPTION_KEY (64 hex characters) and exit",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    if args.generate_key:
        print(generate_encryption_key())
        return 0

    from app.core.startup import safe_settings_summary, validate_environment

    try:
        from app.core.config import get_settings

        settings = get_settings()
    except SettingsValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        return 1

    for key, value in safe_settings_summary(settings).items():
        print(f"{key}: {value}")

    try:
        warnings = validate_environment(settings)
    except ConfigurationError as exc:
        print(exc.message, file=sys.stderr)
        return 1

    for warning in warnings:
        print(f"WARNING: {warning}")
    print("Configuration OK.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
