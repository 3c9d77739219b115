"""Constants for the configuration module.

The OpenAM values are the wire-protocol defaults used when a feed does not
override them.
"""

# OpenAM endpoints (relative to the feed host unless configured absolute)
OPENAM_LOGIN_URI = (
    "/openam/json/authenticate"
    "?module=DataStore&authIndexType=module&authIndexValue=DataStore"
)
OPENAM_LOGOUT_URI = "/openam/json/sessions/?_action=logout"

# Login exchange
OPENAM_SESSION_COOKIE_NAME = "iPlanetDirectoryPro"
OPENAM_USERNAME_HEADER = "X-OpenAM-Username"
OPENAM_PASSWORD_HEADER = "X-OpenAM-Password"  # noqa: S105
OPENAM_SESSION_ID_FIELD = "tokenId"
OPENAM_USER_AGENT = "Drupal/Feeds/HttpFetcher/1.0"

# Logout exchange
OPENAM_LOGOUT_SESSION_HEADER = "iplanetDirectoryPro"
OPENAM_LOGOUT_SUCCESS_MARKER = "Success"

# Cookie name presented on the feed request itself. Fixed by the identity
# provider; never read from FetchConfiguration.
FEED_REQUEST_COOKIE_NAME = "iPlanetDirectoryPro"

# Transport deadline for login, feed and logout requests
DEFAULT_TIMEOUT_SECONDS = 30.0

# Pseudo-schemes rewritten on feed URLs before fetching
PSEUDO_SCHEME_MAP: dict[str, str] = {
    "feed://": "http://",
    "webcal://": "http://",
    "feeds://": "https://",
    "webcals://": "https://",
}

# Supported URL schemes
VALID_URL_SCHEMES = ("http://", "https://")
FEED_URL_SCHEMES = VALID_URL_SCHEMES + tuple(PSEUDO_SCHEME_MAP)

# Prefix for per-feed header cache keys
CACHE_KEY_PREFIX = "feeds_http_download_"

# Log component names
COMPONENT_CONFIG = "config"
COMPONENT_CLI = "cli"
COMPONENT_SESSION = "session"
COMPONENT_FETCH = "fetch"
COMPONENT_CACHE = "cache"
COMPONENT_RUNNER = "runner"
