from typing import Dict, Mapping, Tuple
from sqlalchemy.engine import URL
from ..exceptions import ConnectionError

# Perl DBI driver names found in older connection files
DBD_ALIASES = {
    "pg": "postgresql",
    "postgres": "postgresql",
    "sqlite": "sqlite",
    "sqlite2": "sqlite",
    "oracle": "oracle+oracledb",
    "mysql": "mysql+pymysql",
    "mariadb": "mariadb+pymysql",
    "odbc": "mssql+pyodbc",
}

_HOST_KEYS = ("host", "hostname", "server")
_DATABASE_KEYS = ("database", "dbname", "db")

def build_target(driver_id: str, params: Mapping[str, str]) -> str:
    """
    Build the target descriptor "<driver>[:k1=v1;k2=v2]".
    Pairs are sorted by key so equal mappings give equal descriptors.
    Text that would change how the descriptor splits back apart is rejected.
    """
    if ":" in driver_id:
        raise ConnectionError(f"Invalid database driver '{driver_id}'")
    for key, value in params.items():
        if not key or ";" in key or "=" in key:
            raise ConnectionError(f"Invalid connection key '{key}' for '{driver_id}'")
        if ";" in value:
            raise ConnectionError(f"Connection value '{key}' for '{driver_id}' must not contain ';'")
    pairs = [f"{key}={params[key]}" for key in sorted(params)]
    if not pairs:
        return driver_id
    return f"{driver_id}:{';'.join(pairs)}"

def parse_target(descriptor: str) -> Tuple[str, Dict[str, str]]:
    driver_id, sep, rest = descriptor.partition(":")
    params: Dict[str, str] = {}
    if sep:
        for pair in rest.split(";"):
            if not pair:
                continue
            key, eq, value = pair.partition("=")
            if not eq:
                raise ConnectionError(f"Malformed connection value '{pair}' in '{driver_id}' target")
            params[key] = value
    return driver_id, params

def resolve_drivername(driver_id: str) -> str:
    if "+" in driver_id:
        return driver_id
    return DBD_ALIASES.get(driver_id.lower(), driver_id)

def _pop_first(params: Dict[str, str], keys) -> str:
    value = None
    for key in keys:
        if key in params:
            candidate = params.pop(key)
            if value is None:
                value = candidate
    return value

def to_url(descriptor: str, username: str = "", password: str = "") -> URL:
    """Translate a target descriptor plus credentials into a SQLAlchemy URL."""
    driver_id, params = parse_target(descriptor)
    if not driver_id:
        raise ConnectionError("No database driver in connection target")

    host = _pop_first(params, _HOST_KEYS)
    database = _pop_first(params, _DATABASE_KEYS)
    port = params.pop("port", None)
    try:
        port_number = int(port) if port else None
    except ValueError:
        raise ConnectionError(f"Invalid port '{port}' in connection values")

    return URL.create(
        drivername=resolve_drivername(driver_id),
        username=username or None,
        password=password or None,
        host=host or None,
        port=port_number,
        database=database or None,
        query=params,
    )
