import logging
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from .domain.models import ConnectionCatalog, DatabaseEntry, QuerySpec
from .exceptions import CatalogFormatError, ConfigNotFound, DatabaseNotFound, QueryNotFound

logger = logging.getLogger(__name__)

CONN_FILE_NAME = ".db_conn.xml"

def default_conn_file() -> Path:
    """The connection file sitting next to the running program."""
    return Path(sys.argv[0]).resolve().parent / CONN_FILE_NAME

class ProbeSettings(BaseSettings):
    """Defaults for one probe run; each can be overridden with a DBQUERY_* variable."""
    model_config = SettingsConfigDict(env_prefix="DBQUERY_")

    conn_file: Path = Field(default_factory=default_conn_file)
    warning: str = "0:"
    critical: str = "0:"
    shortname: str = "DB QUERY"
    metric_label: str = "result"

def load_catalog(config_path: Path) -> ConnectionCatalog:
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigNotFound(f"Connection file '{config_path}' does not exist!")

    try:
        with open(config_path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigNotFound(f"Connection file '{config_path}' cannot be read: {e}")

    if config_path.suffix.lower() in (".yaml", ".yml"):
        catalog = _parse_yaml(raw, config_path)
    else:
        catalog = _parse_xml(raw, config_path)
    logger.debug("Loaded %d database(s) from %s", len(catalog.databases), config_path)
    return catalog

def _element_text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None:
        return None
    return element.text or ""

def _parse_xml(raw: bytes, config_path: Path) -> ConnectionCatalog:
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise CatalogFormatError(f"Invalid connection file '{config_path}': {e}")

    databases: Dict[str, DatabaseEntry] = {}
    for db_el in root.iter("database"):
        db_id = db_el.get("id")
        if db_id is None:
            logger.warning("Skipping <database> without id in %s", config_path)
            continue

        dbd = _element_text(db_el.find("dbd"))
        username = _element_text(db_el.find("username"))
        password = _element_text(db_el.find("password"))

        values: Dict[str, str] = {}
        for value_el in db_el.findall("values/value"):
            key = value_el.get("key")
            if key is None:
                logger.warning("Skipping <value> without key for database '%s'", db_id)
                continue
            values[key] = (value_el.text or "").strip()

        queries: Dict[str, str] = {}
        for sql_el in db_el.findall("queries/sql"):
            query_id = sql_el.get("id")
            if query_id is None:
                logger.warning("Skipping <sql> without id for database '%s'", db_id)
                continue
            queries[query_id] = sql_el.text or ""

        databases[db_id] = DatabaseEntry(
            id=db_id,
            dbd=dbd.strip() if dbd is not None else None,
            values=values,
            username=username.strip() if username is not None else None,
            # whitespace-only password is an empty password
            password=password if password is None or password.strip() else "",
            queries=queries,
        )
    return ConnectionCatalog(source=str(config_path), databases=databases)

def _as_text_mapping(raw: Any, what: str, db_id: str) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"'{what}' of database '{db_id}' must be a mapping")
    return {str(k): "" if v is None else str(v) for k, v in raw.items()}

def _parse_yaml(raw: bytes, config_path: Path) -> ConnectionCatalog:
    try:
        document = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise CatalogFormatError(f"Invalid connection file '{config_path}': {e}")
    if not isinstance(document, dict) or not isinstance(document.get("databases") or {}, dict):
        raise CatalogFormatError(f"Invalid connection file '{config_path}': expected a 'databases' mapping")

    databases: Dict[str, DatabaseEntry] = {}
    for db_id, entry in (document.get("databases") or {}).items():
        db_id = str(db_id)
        entry = entry or {}
        if not isinstance(entry, dict):
            raise CatalogFormatError(f"Database '{db_id}' in '{config_path}' must be a mapping")
        fields = {
            key: ("" if entry[key] is None else str(entry[key]))
            for key in ("dbd", "username", "password")
            if key in entry
        }
        try:
            databases[db_id] = DatabaseEntry(
                id=db_id,
                values=_as_text_mapping(entry.get("values"), "values", db_id),
                queries=_as_text_mapping(entry.get("queries"), "queries", db_id),
                **fields,
            )
        except ValidationError as e:
            raise CatalogFormatError(f"Invalid configuration format: {e}")
    return ConnectionCatalog(source=str(config_path), databases=databases)

def resolve(
    catalog: ConnectionCatalog, db_name: str, query_name: str
) -> Tuple[Optional[DatabaseEntry], Optional[str]]:
    """Two independent lookups; the query is only looked for in a found database."""
    entry = catalog.get_database(db_name)
    if entry is None:
        return None, None
    return entry, entry.get_query(query_name)

def resolve_query_spec(
    catalog: ConnectionCatalog, db_name: str, query_name: str, config_path: Optional[Path] = None
) -> QuerySpec:
    source = config_path if config_path is not None else catalog.source
    entry, sql = resolve(catalog, db_name, query_name)
    if entry is None:
        raise DatabaseNotFound(f"Cannot find connection information for database '{db_name}' in '{source}'!")
    if not sql:
        raise QueryNotFound(f"Cannot find query with ID '{query_name}' in database '{db_name}' in '{source}'!")
    return QuerySpec(database=entry, query_id=query_name, sql=sql).validate_select()
