from flask import Flask

from api.__main__ import main


def test_main_runs_configured_app(monkeypatch):
    calls = []
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.delenv("POSTS_API_HOST", raising=False)
    monkeypatch.setenv("POSTS_API_PORT", "9123")
    monkeypatch.setattr(Flask, "run", lambda self, **kwargs: calls.append((self, kwargs)))

    main()

    app, kwargs = calls[0]
    assert app.config["TESTING"] is True
    assert kwargs == {"host": "127.0.0.1", "port": 9123, "debug": app.config["DEBUG"]}
    app.extensions["storage"].close()
