"""
Configuration loading for the recap scripts.

Settings live in recap_config.yaml next to the scripts (override with
--config or the RECAP_CONFIG env var). Secrets stay in the environment:

    NOTION_TOKEN        Notion integration token
    RECAP_DATABASE_ID   recap database id (overrides notion.database_id)
    RECAP_MONTHS_DATABASE_ID
                        monthly recap database id (overrides monthly.notion.database_id)
"""

import logging
import os
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CONFIG_FILE = os.path.join(SCRIPT_DIR, 'recap_config.yaml')

# Notion rejects rich text content longer than this.
NOTION_TEXT_LIMIT = 2000


def get_config_path(config_file: str | None = None) -> str:
    return config_file or os.getenv('RECAP_CONFIG') or DEFAULT_CONFIG_FILE


def load_config(config_file: str | None = None) -> dict:
    """Load configuration from YAML file."""
    config_path = Path(get_config_path(config_file))
    if not config_path.exists():
        logger.error(f"Configuration file not found: {config_path}")
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def get_nested(config: dict, keys: list[str], default=None):
    current = config
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def notion_settings(config: dict) -> dict:
    """Resolve Notion connection settings from config plus environment."""
    return {
        'token': os.environ.get('NOTION_TOKEN'),
        'database_id': os.environ.get('RECAP_DATABASE_ID') or get_nested(config, ['notion', 'database_id']),
        'title_property': get_nested(config, ['notion', 'title_property'], 'Week Recap'),
        'timeout': int(get_nested(config, ['notion', 'timeout_seconds'], 30)),
        'text_limit': int(get_nested(config, ['notion', 'text_limit'], NOTION_TEXT_LIMIT)),
    }


def month_settings(config: dict) -> dict:
    """Notion settings for the monthly recap database; token and timeouts are shared."""
    settings = notion_settings(config)
    settings.update({
        'database_id': (os.environ.get('RECAP_MONTHS_DATABASE_ID')
                        or get_nested(config, ['monthly', 'notion', 'database_id'])),
        'title_property': get_nested(config, ['monthly', 'notion', 'title_property'], 'Month Recap'),
    })
    return settings


def field_name(config: dict, key: str) -> str:
    """Notion property name for one of the recap fields."""
    defaults = {
        'task_summary': 'Personal Task Summary',
        'cal_summary': 'Personal Cal Summary',
        'good': 'Personal - What went well?',
        'bad': "Personal - What didn't go so well?",
        'overview': 'Personal - Overview?',
        'month_retro': 'Month Recap - Personal',
    }
    return get_nested(config, ['notion', 'fields', key], defaults[key])
