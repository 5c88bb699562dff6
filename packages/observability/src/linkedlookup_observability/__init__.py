__all__ = ["bind_log_context", "request_id_middleware", "setup_logging"]

from linkedlookup_observability.logging import bind_log_context, setup_logging
from linkedlookup_observability.middleware import request_id_middleware
