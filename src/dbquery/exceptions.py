class DbQueryException(Exception):
    """Base Exception Class"""
    pass

class ConfigNotFound(DbQueryException):
    """Connection file missing or unreadable"""
    pass

class CatalogFormatError(DbQueryException):
    """Connection file present but malformed"""
    pass

class DatabaseNotFound(DbQueryException):
    """Database id not present in the connection file"""
    pass

class QueryNotFound(DbQueryException):
    """Query id not present for the selected database"""
    pass

class NotASelectQuery(DbQueryException):
    """Query does not begin with SELECT"""
    pass

class MissingConnectionField(DbQueryException):
    """Driver, username or password tag absent"""
    pass

class ConnectionError(DbQueryException):
    """Connection Failure"""
    pass

class PrepareError(DbQueryException):
    """Query could not be compiled or bound"""
    pass

class ExecutionError(DbQueryException):
    """Query failed while executing"""
    pass

class ThresholdParseError(DbQueryException):
    """Malformed warning/critical range"""
    pass
