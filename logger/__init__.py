from .handler import configure_logging, get_logger, separation, set_level

__all__ = ["configure_logging", "get_logger", "separation", "set_level"]
