import pytest
from sqlalchemy import create_engine, text

CATALOG_XML = """<xml>
   <database id='TestDB'>
      <dbd>sqlite</dbd>
      <values>
         <value key='database'>{db_path}</value>
      </values>
      <username></username>
      <password></password>
      <queries>
         <sql id='test'>SELECT COUNT(*) FROM test_data</sql>
         <sql id='above'>SELECT COUNT(*) FROM test_data WHERE n &gt; ?</sql>
         <sql id='between'><![CDATA[SELECT COUNT(*) FROM test_data WHERE n > ? AND n < ?]]></sql>
         <sql id='none'>SELECT n FROM test_data WHERE n &lt; 0</sql>
         <sql id='null'>SELECT NULL</sql>
         <sql id='label'>SELECT label FROM test_data</sql>
         <sql id='purge'>DELETE FROM test_data</sql>
         <sql id='broken'>SELECT 'unterminated FROM test_data</sql>
      </queries>
   </database>
   <database id='NoUser'>
      <dbd>sqlite</dbd>
      <password/>
      <queries>
         <sql id='test'>SELECT 1</sql>
      </queries>
   </database>
   <database id='Unreachable'>
      <dbd>sqlite</dbd>
      <values>
         <value key='database'>{missing_dir}/nowhere.db</value>
      </values>
      <username></username>
      <password></password>
      <queries>
         <sql id='test'>SELECT 1</sql>
      </queries>
   </database>
</xml>
"""

@pytest.fixture
def make_db(tmp_path):
    """Creates a sqlite file holding test_data(n, label) with n = 1..rows."""
    def _make(rows: int = 5, name: str = "test.db"):
        path = tmp_path / name
        engine = create_engine(f"sqlite:///{path}")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE test_data (n INTEGER, label TEXT)"))
            if rows:
                conn.execute(
                    text("INSERT INTO test_data (n, label) VALUES (:n, :label)"),
                    [{"n": i, "label": f"row{i}"} for i in range(1, rows + 1)],
                )
        engine.dispose()
        return path
    return _make

@pytest.fixture
def write_catalog(tmp_path):
    def _write(db_path, name: str = ".db_conn.xml"):
        path = tmp_path / name
        path.write_text(CATALOG_XML.format(db_path=db_path, missing_dir=tmp_path / "missing"))
        return path
    return _write
