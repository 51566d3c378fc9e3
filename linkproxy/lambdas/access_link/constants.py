# Event codes attached to access_link log lines and error responses
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
REGION_NOT_ALLOWED = 'REGION_NOT_ALLOWED'
ACCESS_CODE_REQUIRED = 'ACCESS_CODE_REQUIRED'
FOLDER_LISTED = 'FOLDER_LISTED'
FILE_INFO_SERVED = 'FILE_INFO_SERVED'
FILE_DOWNLOADED = 'FILE_DOWNLOADED'
DOWNLOAD_FAILED = 'DOWNLOAD_FAILED'
RESOLUTION_FAILED = 'RESOLUTION_FAILED'
