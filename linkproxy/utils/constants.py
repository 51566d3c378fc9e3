# Short code lengths (folder codes are shorter than file codes)
FOLDER_CODE_LENGTH = 5
FILE_CODE_LENGTH = 6

# Short code generation retry ceiling
MAX_RETRY_ATTEMPTS = 5

# Upper bound for a link's visit quota
MAX_VISITS_LIMIT = 9999

# Page size used when scanning the key-value store
KV_LIST_LIMIT = 1000

# Default number of releases listed by the release-assets backend
DEFAULT_RELEASE_COUNT = 5

# Default timeout (seconds) for upstream backend calls
DEFAULT_HTTP_TIMEOUT = 30.0

# Internal header carrying an accepted access code to download sub-requests
ACCESS_CODE_HEADER = 'X-Access-Code'

# Request headers forwarded to upstream file downloads
FORWARDED_DOWNLOAD_HEADERS = ('range', 'accept', 'accept-encoding')

# Request header carrying the client's country code
COUNTRY_HEADER = 'cf-ipcountry'

# Application environment variables
APP_ENV_ENV = 'APP_ENV'
APP_NAME_ENV = 'APP_NAME'
AWS_SAM_LOCAL_ENV = 'AWS_SAM_LOCAL'
LOG_LEVEL_ENV = 'LOG_LEVEL'

# AppConfig: identifiers of the deployed configuration document
APPCONFIG_APP_ID_ENV = 'APPCONFIG_APP_ID'
APPCONFIG_ENV_ID_ENV = 'APPCONFIG_ENV_ID'
APPCONFIG_PROFILE_ID_ENV = 'APPCONFIG_PROFILE_ID'

# AppConfig: local agent used under SAM
APPCONFIG_AGENT_URL_ENV = 'APPCONFIG_AGENT_URL'
APPCONFIG_PROFILE_NAME_ENV = 'APPCONFIG_PROFILE_NAME'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
