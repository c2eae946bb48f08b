from weatherapp.core.config import DEFAULT_CORS_ORIGINS, Settings


def test_cors_origins_default(monkeypatch):
    monkeypatch.delenv("WEATHERAPP_CORS_ORIGINS", raising=False)
    assert Settings().cors_origins == DEFAULT_CORS_ORIGINS


def test_cors_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("WEATHERAPP_CORS_ORIGINS", "http://a.test, http://b.test,")
    assert Settings().cors_origins == ["http://a.test", "http://b.test"]


def test_cors_origins_json_array(monkeypatch):
    monkeypatch.setenv("WEATHERAPP_CORS_ORIGINS", '["http://a.test", " http://b.test "]')
    assert Settings().cors_origins == ["http://a.test", "http://b.test"]


def test_blank_api_key_counts_as_missing():
    assert Settings(openweather_api_key="   ").api_key is None
    assert Settings(openweather_api_key="abc").api_key == "abc"
