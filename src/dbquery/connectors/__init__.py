from .base import SQLAlchemyConnector
from .dsn import build_target, parse_target, to_url
from .factory import get_connector

__all__ = ["SQLAlchemyConnector", "build_target", "parse_target", "to_url", "get_connector"]
