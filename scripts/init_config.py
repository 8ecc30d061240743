"""Write the default .direct/config.yml for a workspace.

Usage:
    uv run python scripts/init_config.py [WORKSPACE_DIR]

Does nothing if a config already exists. Edit the generated file to add
custom PII patterns, allowed environment variables and blocked paths.
"""

import logging
import sys
from pathlib import Path

# Ensure project root is on the path when run as a script
sys.path.insert(0, ".")

from guard.config import settings
from guard.policy.loader import init_config


def main() -> None:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    root = Path(sys.argv[1] if len(sys.argv) > 1 else settings.workspace_root).resolve()
    config_path = root / settings.audit_dir_name / settings.config_file_name

    if init_config(config_path):
        print(f"Created config at: {config_path}")
        print("Edit this file to customize PII patterns and security settings.")
    else:
        print(f"Config already exists at: {config_path}")


if __name__ == "__main__":
    main()
