from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

PORT: int = int(getenv("PORT", 8000))

# The command line server is meant for local use, so it binds everywhere
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

LOG_LEVEL: str = getenv("SERVESTATIC_LOG_LEVEL", "info").lower()

LOG_REQUESTS: bool = getenv("SERVESTATIC_LOG_REQUESTS", "0") == "1"

# Size of the chunks read from disk when streaming a file body
READ_SIZE: int = int(getenv("SERVESTATIC_READ_SIZE", 64_000))

# EOF
