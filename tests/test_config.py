from config import Settings, load_settings


def test_defaults(monkeypatch):
    for name in ("MONGODB_URI", "DATABASE_NAME", "PORT", "CORS_ORIGINS",
                 "DB_CONNECT_RETRIES", "DB_CONNECT_DELAY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    assert load_settings() == Settings()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", "mongodb://mongo:27017/")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("DB_CONNECT_RETRIES", "0")
    monkeypatch.setenv("DB_CONNECT_DELAY", "oops")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.mongodb_uri == "mongodb://mongo:27017/"
    assert settings.port == 8080
    assert settings.cors_origins == ("http://a.test", "http://b.test")
    assert settings.db_connect_retries == 1
    assert settings.db_connect_delay == 3.0
    assert settings.log_level == "DEBUG"
