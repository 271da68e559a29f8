from enum import IntEnum
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field
from ..exceptions import MissingConnectionField, NotASelectQuery

Number = Union[int, float]

class StatusLevel(IntEnum):
    """Monitoring states; the integer value doubles as the process exit code."""
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

class DatabaseEntry(BaseModel):
    """
    One <database> entry of the connection file.
    dbd, username and password stay None when their tag is missing altogether,
    an empty tag is the empty string.
    """
    id: str
    dbd: Optional[str] = None
    values: Dict[str, str] = Field(default_factory=dict)
    username: Optional[str] = None
    password: Optional[str] = None
    queries: Dict[str, str] = Field(default_factory=dict)

    def get_query(self, query_id: str) -> Optional[str]:
        return self.queries.get(query_id)

    def missing_fields(self) -> List[str]:
        missing = []
        if self.dbd is None:
            missing.append("database type")
        if self.username is None:
            missing.append("username")
        if self.password is None:
            missing.append("password")
        return missing

    def require_connection_fields(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise MissingConnectionField(f"No {missing[0]} specified for '{self.id}'!")

class ConnectionCatalog(BaseModel):
    """Parsed connection file, keyed by database id."""
    source: Optional[str] = None
    databases: Dict[str, DatabaseEntry] = Field(default_factory=dict)

    def get_database(self, db_name: str) -> Optional[DatabaseEntry]:
        return self.databases.get(db_name)

class QuerySpec(BaseModel):
    """A resolved (database, query) pair."""
    database: DatabaseEntry
    query_id: str
    sql: str

    @staticmethod
    def is_select(sql: str) -> bool:
        return sql.lstrip()[:6].upper() == "SELECT"

    def validate_select(self) -> "QuerySpec":
        # Anything but SELECT could alter the database
        if not self.is_select(self.sql):
            raise NotASelectQuery(f"Query '{self.query_id}' is not a SELECT query!")
        return self

class MetricRecord(BaseModel):
    """Performance data emitted for a numeric result."""
    label: str = "result"
    value: Number
    warning: Optional[str] = None
    critical: Optional[str] = None

class StatusResult(BaseModel):
    status: StatusLevel
    value: Optional[Number] = None
    message: str
    metric: Optional[MetricRecord] = None

    @classmethod
    def failure(cls, message: str) -> "StatusResult":
        return cls(status=StatusLevel.CRITICAL, message=message)
