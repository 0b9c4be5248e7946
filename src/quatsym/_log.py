import logging


#: Library-wide logger; silent apart from warnings until `quatsym.io.log_config`.
log: logging.Logger = logging.getLogger("quatsym")
