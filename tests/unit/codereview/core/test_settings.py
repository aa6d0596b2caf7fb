from pathlib import Path

from codereview.core import CodeReviewSettings, get_config, reset_config


def test_defaults():
    config = CodeReviewSettings(_env_file=None)

    assert config.APP.API_PREFIX == "/api"
    assert config.MONGO.DB == "codereview"
    assert config.AUTH.JWT_ALGORITHM == "HS256"
    assert config.AUTH.REQUIRE_VERIFIED_EMAIL is True
    assert config.MAIL.ENABLED is False
    assert config.STORAGE.BACKEND == "local"
    assert config.STORAGE.MAX_FILE_SIZE == 10 * 1024 * 1024
    assert config.STORAGE.MAX_FILES == 10
    assert config.STORAGE.MAX_IMAGE_SIZE == 5 * 1024 * 1024


def test_nested_environment_overrides(monkeypatch):
    monkeypatch.setenv("CODEREVIEW__MONGO__URI", "mongodb://mongo:27017")
    monkeypatch.setenv("CODEREVIEW__AUTH__JWT_EXPIRES_IN", "60")
    monkeypatch.setenv("CODEREVIEW__STORAGE__BACKEND", "minio")
    monkeypatch.setenv("CODEREVIEW__APP__CORS_ORIGINS", '["https://a.example", "https://b.example"]')

    config = CodeReviewSettings(_env_file=None)

    assert config.MONGO.URI == "mongodb://mongo:27017"
    assert config.AUTH.JWT_EXPIRES_IN == 60
    assert config.STORAGE.BACKEND == "minio"
    assert config.APP.CORS_ORIGINS == ["https://a.example", "https://b.example"]


def test_secrets_are_masked():
    config = CodeReviewSettings(_env_file=None)
    secret = config.AUTH.JWT_SECRET.get_secret_value()
    assert secret
    assert secret not in repr(config.AUTH)


def test_get_config_is_cached_until_reset(monkeypatch):
    first = get_config()
    assert get_config() is first

    monkeypatch.setenv("CODEREVIEW__APP__DEBUG", "true")
    assert get_config().APP.DEBUG is first.APP.DEBUG

    reset_config()
    assert get_config() is not first
    assert get_config().APP.DEBUG is True


def test_directories_expand_user(monkeypatch):
    monkeypatch.setenv("CODEREVIEW__APP__LOG_DIR", "~/cr-logs")
    config = CodeReviewSettings(_env_file=None)
    assert config.log_dir == str(Path("~/cr-logs").expanduser())
