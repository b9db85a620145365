from .local_logger import LocalLogger
