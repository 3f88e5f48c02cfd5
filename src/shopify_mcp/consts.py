"""High-value constants for the Shopify MCP package."""

# Package metadata
PACKAGE_VERSION = "2.0.0"
SERVER_NAME = "shopify-mcp"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
GRAPHQL_URL_TEMPLATE = "https://{domain}/admin/api/{version}/graphql.json"
TOKEN_URL_TEMPLATE = "https://{domain}/admin/oauth/access_token"
ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
GID_PREFIX = "gid://shopify/"
MAX_PAGE_SIZE = 250

# Business logic consts
TOKEN_REFRESH_BUFFER_MINUTES = 5  # refresh 5min early
TOKEN_REFRESH_RETRY_SECONDS = 60
DEFAULT_TOKEN_EXPIRY_SECONDS = 86400  # client-credentials tokens last ~24h
RETRY_BASE_DELAY_SECONDS = 1.0
RETRY_MAX_JITTER_SECONDS = 1.0
RETRY_MAX_DELAY_SECONDS = 30.0
MAX_LOGGED_QUERY_LENGTH = 200
DEFAULT_TOOL_PACKAGES_FILE = "config/tool_packages.json"
