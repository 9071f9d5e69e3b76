"""Database configuration tests."""

from app import build_database_uri

CLOUD_SQL_VARS = ('DB_USER', 'DB_PASS', 'DB_NAME', 'INSTANCE_CONNECTION_NAME')


def test_database_url_wins(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'postgresql://scoring@localhost/scoring')
    monkeypatch.setenv('DB_USER', 'ignored')
    assert build_database_uri() == 'postgresql://scoring@localhost/scoring'


def test_cloud_sql_socket(monkeypatch):
    monkeypatch.delenv('DATABASE_URL', raising=False)
    for name, value in zip(CLOUD_SQL_VARS, ('judge', 'secret', 'scores', 'proj:region:db')):
        monkeypatch.setenv(name, value)

    assert build_database_uri() == (
        'postgresql+psycopg2://judge:secret@/scores?host=/cloudsql/proj:region:db'
    )


def test_sqlite_fallback(monkeypatch):
    monkeypatch.delenv('DATABASE_URL', raising=False)
    monkeypatch.setenv('DB_USER', 'judge')
    for name in CLOUD_SQL_VARS[1:]:
        monkeypatch.delenv(name, raising=False)
    assert build_database_uri() == 'sqlite:///scoring.db'
