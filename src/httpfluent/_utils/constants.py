# Headers
HEADER_ACCEPT = "Accept"
HEADER_CONTENT_TYPE = "Content-Type"

# Environment variables
ENV_PERMITTED_STATUS_CODES = "HTTPFLUENT_PERMITTED_STATUS_CODES"
ENV_DEFAULT_HEADERS = "HTTPFLUENT_DEFAULT_HEADERS"
ENV_DISABLE_SSL_VERIFY = "HTTPFLUENT_DISABLE_SSL_VERIFY"
ENV_TIMEOUT = "HTTPFLUENT_TIMEOUT"
ENV_SSL_CERT_FILE = "SSL_CERT_FILE"
ENV_REQUESTS_CA_BUNDLE = "REQUESTS_CA_BUNDLE"
ENV_SSL_CERT_DIR = "SSL_CERT_DIR"

# Defaults
DEFAULT_PERMITTED_STATUS_CODES = frozenset(range(200, 206))
DEFAULT_TIMEOUT = 30.0
DEFAULT_ENCODING = "utf-8"
