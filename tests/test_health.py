"""Application lifespan and health check."""

from functools import partial

import pytest
from fastapi.testclient import TestClient

from tracker import main
from tracker.core.exceptions import GeoResolverException
from tracker.services.bootstrap import init_app_config


@pytest.fixture
def client(monkeypatch, writer_factory, tmp_path):
    monkeypatch.setenv("SERVER__AUTH", "t1,t2")
    monkeypatch.setenv("GEO__MAXMIND_PATH", str(tmp_path / "no-geo"))
    monkeypatch.setattr(
        main,
        "init_app_config",
        partial(
            init_app_config,
            writer_factory=writer_factory,
            hostname_resolver=lambda: "tracker-test",
            logging_setup=lambda settings, server_name: None,
        ),
    )
    app = main.create_application()
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["server_name"] == "tracker-test"
    assert body["authority"] == "0.0.0.0:8001"
    assert body["geo_enabled"] is False


def test_app_config_on_state(client: TestClient) -> None:
    app_config = client.app.state.app_config
    assert app_config.is_authorized("t1")
    assert app_config.is_authorized("t2")
    assert not app_config.is_authorized("t3")


def test_shutdown_closes_event_logs(monkeypatch, writer_factory, tmp_path) -> None:
    monkeypatch.setenv("GEO__MAXMIND_PATH", str(tmp_path / "no-geo"))
    monkeypatch.setattr(
        main,
        "init_app_config",
        partial(
            init_app_config,
            writer_factory=writer_factory,
            logging_setup=lambda settings, server_name: None,
        ),
    )
    with TestClient(main.create_application()):
        assert len(writer_factory.created) == 1

    assert writer_factory.created[0].close_calls == 1


def test_app_exception_rendered_as_json(monkeypatch, writer_factory, tmp_path) -> None:
    monkeypatch.setenv("GEO__MAXMIND_PATH", str(tmp_path / "no-geo"))
    monkeypatch.setattr(
        main,
        "init_app_config",
        partial(
            init_app_config,
            writer_factory=writer_factory,
            logging_setup=lambda settings, server_name: None,
        ),
    )
    app = main.create_application()

    @app.get("/geo-check")
    async def geo_check() -> dict:
        raise GeoResolverException("/data/geo", "no .mmdb database found")

    with TestClient(app) as test_client:
        response = test_client.get("/geo-check")

    assert response.status_code == 503
    assert response.json() == {
        "error": {
            "code": "GEO_RESOLVER_ERROR",
            "message": "Unable to open geo database at '/data/geo': no .mmdb database found",
            "details": {"path": "/data/geo"},
        }
    }
