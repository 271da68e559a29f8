from ..domain.interfaces import QueryConnector
from .base import SQLAlchemyConnector

def get_connector(target: str, username: str = "", password: str = "", alias: str = "unknown") -> QueryConnector:
    """
    Factory function to create the connector instance for a target
    descriptor built by build_target().
    """
    return SQLAlchemyConnector(target, username, password, alias)
