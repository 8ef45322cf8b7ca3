"""Tests for the typer CLI."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from carsonrent import cli
from carsonrent.models.car import Car
from carsonrent.services.factory import ApplicationContext, create_test_application_context

runner = CliRunner()


def test_version_command() -> None:
    result = runner.invoke(cli.app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.startswith("carsonrent ")


def test_serve_runs_uvicorn_with_app(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = {}

    def fake_run(app, host, port, log_level):
        calls.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)

    result = runner.invoke(
        cli.app,
        [
            "serve",
            "--port",
            "9090",
            "--database",
            str(tmp_path / "cars.db"),
            "--search-path",
            str(tmp_path / "search"),
            "--log-level",
            "debug",
        ],
    )

    assert result.exit_code == 0, result.output
    assert calls["port"] == 9090
    assert calls["host"] == "127.0.0.1"
    assert calls["log_level"] == "debug"
    assert any(route.path == "/api/cars" for route in calls["app"].routes)


def test_reindex_reports_counts(monkeypatch: pytest.MonkeyPatch, fake_embedding_function) -> None:
    seeded: list[ApplicationContext] = []

    def fake_context(settings) -> ApplicationContext:
        context = create_test_application_context(embedding_function=fake_embedding_function, settings=settings)
        seeded.append(context)
        original_initialize = context.initialize

        async def initialize_and_seed() -> None:
            await original_initialize()
            await context.service("car").save(Car(brand="Mini", model="Cooper", license_plate="MC-1"))

        context.initialize = initialize_and_seed
        return context

    monkeypatch.setattr(cli, "create_application_context", fake_context)

    result = runner.invoke(cli.app, ["reindex"])

    assert result.exit_code == 0, result.output
    assert "Reindexed 1 car entities" in result.stdout
    assert "Reindexed 0 coordinates entities" in result.stdout
    assert len(seeded) == 1
