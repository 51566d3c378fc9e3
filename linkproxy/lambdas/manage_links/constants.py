# Event codes attached to manage_links log lines and error responses
ROUTE_NOT_FOUND = 'ROUTE_NOT_FOUND'
INVALID_JSON = 'INVALID_JSON'
INVALID_PARAMETERS = 'INVALID_PARAMETERS'
LINK_CREATED = 'LINK_CREATED'
LINK_UPDATED = 'LINK_UPDATED'
LINK_DELETED = 'LINK_DELETED'
LINKS_LISTED = 'LINKS_LISTED'
EXPIRED_CLEARED = 'EXPIRED_CLEARED'
