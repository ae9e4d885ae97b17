#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def _load_env_file():
    """
    Loads DJANGO_ENV_FILE, or the `.env` beside this script, before the
    settings module is chosen so DJANGO_SETTINGS_MODULE can live there too.
    """
    env_file = os.environ.get('DJANGO_ENV_FILE') or Path(__file__).resolve().parent / '.env'
    load_dotenv(env_file)


def main():
    """Run administrative tasks."""
    _load_env_file()
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'artisan.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
