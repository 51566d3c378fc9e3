"""Utility functions for application configuration management.

Configuration lives in **AWS AppConfig**. Each environment (`APP_ENV`) has a
dedicated AppConfig *Environment* within the AppConfig *Application*
identified by `APP_NAME`. The deployed JSON document looks like this:

    {
        "build": 12,
        "configs": {
            "access_link": {
                "redis": {"host": "...", "port": 6379, "db": 0},
                "sources": {
                    "alist_api_url": "https://alist.example.org",
                    "alist_token": "...",
                    "github_token": "..."
                },
                "access": {"allowed_regions": ["DE", "NL"]}
            },
            "manage_links": { ... }
        }
    }

Each Lambda loads its own section (e.g. `"access_link"`). The `sources` and
`access` sections are then frozen into an EngineConfig, which is injected into
the backend registry and adapters; nothing below the Lambda layer reads the
environment.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), defaulting to `'local'`.
    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.
    app_prefix() -> str | None
        Return the key prefix for DAOs, or None if `APP_NAME` is not set.
    load_config(lambda_name: str) -> dict
        Load the configuration section of a Lambda from AWS AppConfig
        (or from a local AppConfig agent under SAM).

Classes:
    EngineConfig:
        Immutable backend configuration (API base URLs, tokens, region allow-list).

Example:
    >>> from linkproxy.utils.config import load_config, EngineConfig
    >>> app_config = load_config('access_link')
    >>> engine_config = EngineConfig.from_dict(app_config)
    >>> engine_config.alist_api_url
    'https://alist.example.org'
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass, fields
from typing import Any, Optional
from collections.abc import Callable

import boto3

from linkproxy.utils.helpers import require_environment, running_locally
from linkproxy.utils.constants import (
    APP_ENV_ENV,
    APP_NAME_ENV,
    APPCONFIG_APP_ID_ENV,
    APPCONFIG_ENV_ID_ENV,
    APPCONFIG_PROFILE_ID_ENV,
    APPCONFIG_AGENT_URL_ENV,
    APPCONFIG_PROFILE_NAME_ENV,
    DEFAULT_HTTP_TIMEOUT,
)


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(APP_ENV_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME' (None if unset)."""
    return os.environ.get(APP_NAME_ENV)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'linkproxy'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'linkproxy:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class EngineConfig:
    """Process-wide backend settings, fixed at Lambda initialization

    Attributes:
        alist_api_url (Optional[str]):
            Base URL of the AList server (list API and /d/ direct downloads).
        alist_token (Optional[str]):
            Value of the Authorization header sent to AList.
        github_api_url (str):
            Base URL of the repository contents and releases API.
        github_raw_url (str):
            Base URL of raw file content for a pinned ref.
        github_download_url (str):
            Base URL of release asset downloads.
        github_token (Optional[str]):
            Bearer token for the GitHub API (raises rate limits, private repos).
        http_timeout (float):
            Timeout in seconds for every upstream call.
        allowed_regions (tuple[str, ...]):
            Upper-case country codes allowed to access links. Empty allows all.
        admin_path (Optional[str]):
            Path prefix of the administrative endpoints.
    """

    alist_api_url: Optional[str] = None
    alist_token: Optional[str] = None
    github_api_url: str = 'https://api.github.com'
    github_raw_url: str = 'https://raw.githubusercontent.com'
    github_download_url: str = 'https://github.com'
    github_token: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    allowed_regions: tuple[str, ...] = ()
    admin_path: Optional[str] = None

    @classmethod
    def from_dict(cls, app_config: dict[str, Any]) -> 'EngineConfig':
        """Build an EngineConfig from a Lambda's AppConfig section

        Unknown keys are ignored so the AppConfig document can grow ahead of
        the code. Region codes are trimmed and upper-cased.

        Example:
            >>> EngineConfig.from_dict({'sources': {'alist_api_url': 'https://alist'}, 'access': {'allowed_regions': 'de, nl'}})
            EngineConfig(alist_api_url='https://alist', ..., allowed_regions=('DE', 'NL'), ...)
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in {**app_config.get('sources', {}), **app_config.get('access', {})}.items() if k in known}

        regions = values.pop('allowed_regions', ())
        if isinstance(regions, str):
            regions = regions.split(',')
        values['allowed_regions'] = tuple(r.strip().upper() for r in regions if r and r.strip())

        if 'http_timeout' in values:
            values['http_timeout'] = float(values['http_timeout'])

        return cls(**values)

    def region_allowed(self, region: str | None) -> bool:
        """Check a request's country code against the allow-list (empty list allows all)."""
        if not self.allowed_regions:
            return True
        return bool(region) and region.upper() in self.allowed_regions


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the configuration JSON from the local agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise ValueError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise ValueError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise ValueError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        agent_url = __validate_appconfig_url(os.getenv(APPCONFIG_AGENT_URL_ENV))
        if not running_locally() or not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(APPCONFIG_PROFILE_NAME_ENV, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            config = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
        return config['configs'][lambda_name]

    return wrapper


@_sam_load_local_appconfig
@require_environment(APPCONFIG_APP_ID_ENV, APPCONFIG_ENV_ID_ENV, APPCONFIG_PROFILE_ID_ENV)
def load_config(lambda_name: str) -> dict:
    """Load configuration for a given Lambda from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "access_link" or "manage_links").

    Returns:
        dict: The lambda's config section as a Python dictionary.

    Raises:
        KeyError: If a required environment variable is missing, or the
                  document has no section for `lambda_name`.
        botocore.exceptions.ClientError: If AppConfig rejects the request.

    Example:
        >>> app_config = load_config('access_link')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[APPCONFIG_APP_ID_ENV],
        EnvironmentIdentifier=os.environ[APPCONFIG_ENV_ID_ENV],
        ConfigurationProfileIdentifier=os.environ[APPCONFIG_PROFILE_ID_ENV],
    )['InitialConfigurationToken']

    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    config = json.loads(content.decode('utf-8'))

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
    return config['configs'][lambda_name]
