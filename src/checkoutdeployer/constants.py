"""Fixed paths and names used by the deployment pipeline."""

STORE_HOST_TEMPLATE = "https://store-{store_hash}.mybigcommerce.com"
DAV_PATH = "/dav"
CHECKOUT_SETTINGS_PATH = "/manage/settings/checkout"

CONTENT_ROOT = "/content/checkout"
SCRIPT_REFERENCE_PREFIX = "webdav:checkout"
STATIC_DIR_NAME = "static"

DEFAULT_BUILD_COMMAND = "npm run build"
DEFAULT_DIST_DIR = "dist"
DEFAULT_MAX_WORKERS = 8
DEFAULT_LOADER_SCRIPT = "auto-loader-1.96.1.js"
LOADER_SCRIPT_PATTERN = "auto-loader-*.js"

CREDENTIALS_FILE_TEMPLATE = "env.{environment}.json"
CREDENTIAL_KEYS = ("WEBDAV_STOREHASH", "WEBDAV_USERNAME", "WEBDAV_PASSWORD")
DEFAULTS_FILE_NAME = ".checkoutdeployer.yml"
