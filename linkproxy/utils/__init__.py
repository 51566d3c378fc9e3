from linkproxy.utils.config import app_env, app_name, app_prefix, load_config, EngineConfig
from linkproxy.utils.helpers import base_url, get_short_url, now_ms, require_environment, running_locally
from linkproxy.utils.shortener import generate_shortcode, mint_shortcode, code_length
from linkproxy.utils.logging import initialize_logging
from linkproxy.utils import paths


__all__ = [
    'generate_shortcode',
    'mint_shortcode',
    'code_length',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'EngineConfig',
    'base_url',
    'get_short_url',
    'now_ms',
    'require_environment',
    'running_locally',
    'initialize_logging',
    'paths',
]
