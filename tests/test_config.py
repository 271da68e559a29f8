"""Tests for connection file loading and lookups."""
from pathlib import Path
import pytest
from dbquery.config import ProbeSettings, load_catalog, resolve, resolve_query_spec
from dbquery.exceptions import (
    CatalogFormatError,
    ConfigNotFound,
    DatabaseNotFound,
    MissingConnectionField,
    NotASelectQuery,
    QueryNotFound,
)

def test_missing_file_is_config_not_found(tmp_path: Path):
    with pytest.raises(ConfigNotFound) as excinfo:
        load_catalog(tmp_path / "nope.xml")

    assert "does not exist" in str(excinfo.value)

def test_malformed_xml_is_format_error(tmp_path: Path):
    path = tmp_path / "bad.xml"
    path.write_text("<xml><database id='x'></xml>")

    with pytest.raises(CatalogFormatError):
        load_catalog(path)

def test_loads_example_entry(write_catalog):
    catalog = load_catalog(write_catalog("/data/test.db"))
    entry = catalog.get_database("TestDB")

    assert entry.dbd == "sqlite"
    assert entry.values == {"database": "/data/test.db"}
    assert entry.username == ""
    assert entry.password == ""
    assert entry.get_query("test") == "SELECT COUNT(*) FROM test_data"

def test_entities_and_cdata_are_decoded(write_catalog):
    entry = load_catalog(write_catalog("/data/test.db")).get_database("TestDB")

    assert entry.get_query("above") == "SELECT COUNT(*) FROM test_data WHERE n > ?"
    assert entry.get_query("between") == "SELECT COUNT(*) FROM test_data WHERE n > ? AND n < ?"

def test_empty_password_tag_is_present_but_absent_username_is_not(write_catalog):
    entry = load_catalog(write_catalog("/data/test.db")).get_database("NoUser")

    assert entry.password == ""
    assert entry.username is None
    assert entry.missing_fields() == ["username"]
    with pytest.raises(MissingConnectionField) as excinfo:
        entry.require_connection_fields()
    assert str(excinfo.value) == "No username specified for 'NoUser'!"

def test_whitespace_password_is_empty(tmp_path: Path):
    path = tmp_path / "conn.xml"
    path.write_text(
        "<xml><database id='A'><dbd>mysql</dbd><username>u</username>"
        "<password>   </password></database></xml>"
    )

    assert load_catalog(path).get_database("A").password == ""

def test_duplicate_keys_last_write_wins(tmp_path: Path):
    path = tmp_path / "conn.xml"
    path.write_text(
        """<xml>
        <database id='A'>
           <dbd>mysql</dbd>
           <values>
              <value key='host'>first</value>
              <value key='host'>second</value>
              <value key='port'>3306</value>
           </values>
           <username>u</username><password>p</password>
           <queries>
              <sql id='q'>SELECT 1</sql>
              <sql id='q'>SELECT 2</sql>
           </queries>
        </database>
        </xml>"""
    )

    entry = load_catalog(path).get_database("A")
    assert entry.values == {"host": "second", "port": "3306"}
    assert entry.queries == {"q": "SELECT 2"}

def test_yaml_catalog(tmp_path: Path):
    path = tmp_path / "conn.yaml"
    path.write_text(
        """
databases:
  TestDB:
    dbd: Pg
    values:
      host: db1
      port: 5432
    username: nagios
    password:
    queries:
      test: SELECT COUNT(*) FROM test_data
  NoPassword:
    dbd: Pg
    username: nagios
"""
    )

    catalog = load_catalog(path)
    entry = catalog.get_database("TestDB")
    assert entry.values == {"host": "db1", "port": "5432"}
    assert entry.password == ""
    assert entry.get_query("test") == "SELECT COUNT(*) FROM test_data"
    assert catalog.get_database("NoPassword").password is None

def test_yaml_catalog_must_be_mapping(tmp_path: Path):
    path = tmp_path / "conn.yml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(CatalogFormatError):
        load_catalog(path)

def test_resolve_distinguishes_missing_database_and_query(write_catalog):
    catalog = load_catalog(write_catalog("/data/test.db"))

    entry, sql = resolve(catalog, "TestDB", "test")
    assert entry is not None and sql is not None

    entry, sql = resolve(catalog, "TestDB", "nope")
    assert entry is not None and sql is None

    entry, sql = resolve(catalog, "OtherDB", "test")
    assert entry is None and sql is None

def test_resolve_is_case_sensitive(write_catalog):
    catalog = load_catalog(write_catalog("/data/test.db"))

    assert resolve(catalog, "testdb", "test") == (None, None)
    assert resolve(catalog, "TestDB", "TEST")[1] is None

def test_resolve_query_spec_messages(write_catalog):
    path = write_catalog("/data/test.db")
    catalog = load_catalog(path)

    with pytest.raises(DatabaseNotFound) as excinfo:
        resolve_query_spec(catalog, "OtherDB", "test", path)
    assert str(excinfo.value) == f"Cannot find connection information for database 'OtherDB' in '{path}'!"

    with pytest.raises(QueryNotFound) as excinfo:
        resolve_query_spec(catalog, "TestDB", "nope", path)
    assert str(excinfo.value) == f"Cannot find query with ID 'nope' in database 'TestDB' in '{path}'!"

def test_non_select_query_is_rejected(write_catalog):
    catalog = load_catalog(write_catalog("/data/test.db"))

    with pytest.raises(NotASelectQuery) as excinfo:
        resolve_query_spec(catalog, "TestDB", "purge")
    assert str(excinfo.value) == "Query 'purge' is not a SELECT query!"

@pytest.mark.parametrize("sql,ok", [
    ("SELECT 1", True),
    ("  \n\tselect 1", True),
    ("SeLeCt 1", True),
    ("WITH x AS (SELECT 1) SELECT * FROM x", False),
    ("DELETE FROM t", False),
    ("SELEC 1", False),
])
def test_select_rule(sql, ok):
    from dbquery.domain.models import QuerySpec

    assert QuerySpec.is_select(sql) is ok

def test_settings_defaults(monkeypatch):
    for name in ("DBQUERY_WARNING", "DBQUERY_CRITICAL", "DBQUERY_CONN_FILE"):
        monkeypatch.delenv(name, raising=False)
    settings = ProbeSettings()

    assert settings.warning == "0:"
    assert settings.critical == "0:"
    assert settings.conn_file.name == ".db_conn.xml"

def test_settings_from_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("DBQUERY_CONN_FILE", str(tmp_path / "other.xml"))
    monkeypatch.setenv("DBQUERY_CRITICAL", "100:")

    settings = ProbeSettings()
    assert settings.conn_file == tmp_path / "other.xml"
    assert settings.critical == "100:"
