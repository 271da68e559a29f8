import logging
import re
from typing import Any, Iterator, Optional, Sequence
from sqlalchemy import create_engine, text, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import ArgumentError, DBAPIError, ProgrammingError, SQLAlchemyError
from sqlalchemy.pool import NullPool
from .binding import bind_positional
from .dsn import to_url
from ..exceptions import ConnectionError, ExecutionError, PrepareError

logger = logging.getLogger(__name__)

# SQLite reports statement compile failures as OperationalError
_PREPARE_FAILURE_RE = re.compile(r"syntax error|^no such (table|column|function)|^incomplete input", re.IGNORECASE)

def _driver_message(exc: Exception) -> str:
    """The underlying DBAPI diagnostic when there is one."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)

class SQLAlchemyConnector:
    """
    Single-use SQLAlchemy connection for one read-only query.
    The engine is created without a pool; close() releases both the
    connection and the engine.
    """
    def __init__(self, target: str, username: str = "", password: str = "", db_alias: str = "unknown"):
        self.target = target
        self.username = username
        self.password = password
        self.db_alias = db_alias
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    @staticmethod
    def _enforce_read_only_listener(conn, cursor, statement, parameters, context, executemany):
        """
        Strategy 1: Event Hook (Interceptor).
        Blocks any SQL that doesn't start with a whitelist keyword.
        """
        sql = statement.strip().upper()

        # Whitelist: Only allow safe starting keywords
        allowed_starts = (
            "SELECT",
            "SET",          # Needed for session configuration
            "ALTER SESSION" # Needed for Oracle session config
        )

        if not any(sql.startswith(keyword) for keyword in allowed_starts):
            raise PermissionError(
                f"SAFETY BLOCK: Operation blocked! Only read-only queries are allowed. "
                f"Attempted: {sql[:50]}..."
            )

    @staticmethod
    def _set_readonly_transaction_listener(connection):
        """
        Strategy 2: Transaction-Level Read-Only Mode.
        Sets the session to READ ONLY immediately after connection.
        """
        dialect = connection.dialect.name.lower()
        try:
            if dialect == "oracle":
                # Oracle: SET TRANSACTION READ ONLY must be the first statement
                connection.execute(text("SET TRANSACTION READ ONLY"))
            elif dialect == "postgresql":
                connection.execute(text("SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY"))
        except SQLAlchemyError as e:
            # Strategy 1 is the primary guard
            logger.warning("Failed to set READ ONLY transaction on %s: %s", dialect, _driver_message(e))

    def connect(self) -> None:
        if self._connection is not None:
            return
        try:
            url = to_url(self.target, self.username, self.password)
            self._engine = create_engine(url, poolclass=NullPool)

            # Register Strategy 1: Interceptor
            event.listen(self._engine, "before_cursor_execute", self._enforce_read_only_listener)

            # Register Strategy 2: Session Configuration
            event.listen(self._engine, "engine_connect", self._set_readonly_transaction_listener)

            logger.debug("Connecting to '%s' using %s", self.db_alias, url.render_as_string(hide_password=True))
            self._connection = self._engine.connect()
        except ConnectionError:
            raise
        except Exception as e:
            # DBAPI connect() rejects unknown connection values with TypeError, unwrapped
            raise ConnectionError(f"Failed to connect to database '{self.db_alias}': {_driver_message(e)}")

    def close(self) -> None:
        if self._connection is not None:
            # Closing rolls back the implicit transaction; nothing is ever committed
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "SQLAlchemyConnector":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def fetch_first_column(self, sql: str, placeholders: Sequence[str] = ()) -> Iterator[Any]:
        """
        Runs sql with positional placeholders and yields the first column of
        every row. Every row is fetched so the result set is drained.
        """
        if self._connection is None:
            raise ConnectionError(f"No database connection for '{self.db_alias}'!")

        bound_sql, params = bind_positional(sql, list(placeholders))
        try:
            statement = text(bound_sql)
        except ArgumentError as e:
            raise PrepareError(f"Error in preparing query!: {e}")

        try:
            result = self._connection.execute(statement, params)
        except ProgrammingError as e:
            raise PrepareError(f"Error in preparing query!: {_driver_message(e)}")
        except DBAPIError as e:
            message = _driver_message(e)
            if _PREPARE_FAILURE_RE.search(message):
                raise PrepareError(f"Error in preparing query!: {message}")
            raise ExecutionError(f"Error in executing query!: {message}")
        except (SQLAlchemyError, PermissionError) as e:
            raise ExecutionError(f"Error in executing query!: {_driver_message(e)}")

        try:
            for row in result:
                yield row[0] if len(row) else None
        except SQLAlchemyError as e:
            raise ExecutionError(f"Error in executing query!: {_driver_message(e)}")
        finally:
            result.close()
