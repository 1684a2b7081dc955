import os
import json
from pathlib import Path
from dotenv import load_dotenv
from .logging_config import setup_app_logging
import logging

# Load environment variables from .env file
load_dotenv()

# Get the config directory path (where this file is located)
CONFIG_DIR = Path(__file__).parent

PROJECT_ROOT = CONFIG_DIR.parent

# Load configuration from config.json
config_path = CONFIG_DIR / 'config.json'
with open(config_path, 'r', encoding='utf-8') as f:
    CONFIG = json.load(f)

CONFIG['project_root'] = str(PROJECT_ROOT)

# --- System Prompt Loading ---
system_prompt_path = CONFIG_DIR / 'parenting_system_prompt.txt'
try:
    with open(system_prompt_path, 'r', encoding='utf-8') as f:
        CONFIG['parenting_system_prompt'] = f.read().strip()
except FileNotFoundError:
    raise FileNotFoundError(
        f"Parenting system prompt file not found: {system_prompt_path}\n"
        f"Please ensure parenting_system_prompt.txt exists in the config directory."
    )

# Environment variables. Every integration is optional: a missing key switches the
# matching capability off instead of failing the import.
ENV = {
    provider['api_key_env']: os.getenv(provider['api_key_env'])
    for provider in CONFIG.get('llm', {}).get('providers', [])
    if provider.get('api_key_env')
}
for section, key in (('search', 'api_key_env'), ('video', 'api_key_env'), ('video', 'replica_env')):
    env_name = CONFIG.get(section, {}).get(key)
    if env_name:
        ENV[env_name] = os.getenv(env_name)


def validate_config():
    """Validate that the required configuration sections are present.

    Credentials are deliberately not validated here: a provider or search key that
    is absent is a capability flag, not a configuration error. Only the structural
    sections the orchestration engine reads at runtime are required.
    """
    required_sections = ['llm', 'search', 'memory']
    for section in required_sections:
        if section not in CONFIG:
            raise ValueError(f"Missing configuration section: {section}")

    for provider in CONFIG['llm'].get('providers', []):
        for key in ('name', 'api_key_env', 'endpoint', 'model', 'priority'):
            if key not in provider:
                raise ValueError(
                    f"Provider entry {provider.get('name', '<unnamed>')!r} is missing '{key}'"
                )

# Validate configuration on module import
validate_config()

# --- Helper function to get config value from CONFIG or environment variable ---
def get_config_value(json_keys: list, env_var_name: str, default_value: any = None):
    """
    Retrieves a configuration value.
    Priority:
    1. Environment variable (if env_var_name is provided and variable is set).
    2. Value from CONFIG dictionary (using json_keys).
    3. default_value.
    """
    if env_var_name:
        env_value = os.getenv(env_var_name)
        if env_value is not None:
            if isinstance(default_value, bool):
                if env_value.lower() == 'true': return True
                if env_value.lower() == 'false': return False
            elif isinstance(default_value, (int, float)):
                try:
                    return type(default_value)(env_value)
                except ValueError:
                    pass
            return env_value

    current_level = CONFIG
    try:
        for key in json_keys:
            current_level = current_level[key]
        if isinstance(current_level, (str, int, bool, float, list, dict)):
            return current_level
    except (KeyError, TypeError):
        pass

    return default_value

# --- Timeouts ---
# Outbound calls are always bounded; the durations are configurable per deployment.
CONFIG['llm']['timeout_s'] = get_config_value(['llm', 'timeout_s'], 'LLM_TIMEOUT_S', 20.0)
CONFIG['search']['timeout_s'] = get_config_value(['search', 'timeout_s'], 'SEARCH_TIMEOUT_S', 5.0)

# --- Logging Configuration ---
CONFIG['logging'] = {
    'level': get_config_value(['logging', 'level'], 'LOG_LEVEL', 'INFO'),
    'file_path': get_config_value(['logging', 'file_path'], 'LOG_FILE_PATH', 'logs/parentgpt.log'),
    'max_bytes': get_config_value(['logging', 'max_bytes'], 'LOG_MAX_BYTES', 5*1024*1024), # 5MB
    'backup_count': get_config_value(['logging', 'backup_count'], 'LOG_BACKUP_COUNT', 3),
    'format': get_config_value(
        ['logging', 'format'],
        'LOG_FORMAT',
        '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'
    ),
    'date_format': get_config_value(
        ['logging', 'date_format'],
        'LOG_DATE_FORMAT',
        '%Y-%m-%d %H:%M:%S'
    )
}

# --- Setup Application Logging ---
setup_app_logging(config=CONFIG.get('logging'))

config_init_logger = logging.getLogger(__name__)
config_init_logger.info("[config_init] Logging initialized from config/__init__.py using setup_app_logging.")
