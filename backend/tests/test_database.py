from database import DEV_DATABASE_PATH, resolve_database_url


def test_empty_url_falls_back_to_local_sqlite():
    url, connect_args = resolve_database_url("")
    assert url == f"sqlite:///{DEV_DATABASE_PATH}"
    assert connect_args == {"check_same_thread": False}


def test_configured_sqlite_allows_threadpool_access():
    assert resolve_database_url("sqlite://")[1] == {"check_same_thread": False}


def test_hosted_postgres_scheme_is_rewritten():
    url, connect_args = resolve_database_url("postgres://u:p@db.example.com:5432/tickets")
    assert url == "postgresql://u:p@db.example.com:5432/tickets"
    assert connect_args == {}

    assert resolve_database_url("postgresql://u:p@h/db")[0] == "postgresql://u:p@h/db"
