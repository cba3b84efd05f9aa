"""Static server constants."""

PROJECT_NAME = "BizBoard"
API_V1_STR = "/api/v1"
API_VERSION = "1.0.0"
SCHEMA_VERSION = "v1"
