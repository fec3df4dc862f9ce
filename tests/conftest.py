"""
Shared fixtures for the API versioning tests.

Provides a small set of versioned controllers and factories for
applications built from them with different settings.
"""

import os
import sys
from pathlib import Path

import pytest
from flask import Blueprint, g
from flask_login import login_required

sys.path.append(str(Path(__file__).resolve().parents[1]))

from api_versioning import api_version, versioned_route
from config import ApiDemoConfig
from web.app import create_app


weather = Blueprint("weatherforecast", __name__)


@versioned_route(weather, "/weatherforecast")
@api_version("0.9", deprecated=True)
@api_version("1.0")
def get_forecast_v1():
    """Get the five day forecast."""
    return {"version": str(g.api_version), "days": 5}


@versioned_route(weather, "/weatherforecast")
@api_version("2.0")
def get_forecast_v2():
    """Get the forecast with a configurable number of days.
    ---
    get:
      parameters:
        - name: days
          in: query
          schema:
            type: integer
      responses:
        200:
          description: Forecast entries
    """
    return {"version": str(g.api_version), "days": 7}


@versioned_route(weather, "/weatherforecast/hourly")
@api_version("2.0")
def get_hourly_forecast():
    """Get the hourly forecast."""
    return {"version": str(g.api_version), "hours": 24}


@versioned_route(weather, "/weatherforecast/reset", methods=["POST"])
@api_version("1.0")
@login_required
def reset_forecast():
    """Reset cached forecasts."""
    return {"reset": True}


stations = Blueprint("stations", __name__, url_prefix="/api")


@versioned_route(stations, "/v<apiversion:version>/stations/<int:station_id>")
@api_version("1.0")
def get_station_v1(version, station_id):
    """Get a weather station."""
    return {"version": str(g.api_version), "station_id": station_id}


@versioned_route(stations, "/v<apiversion:version>/stations/<int:station_id>")
@api_version("2.0")
def get_station_v2(version, station_id):
    """Get a weather station with its sensors."""
    return {"version": str(g.api_version), "station_id": station_id, "sensors": []}


CONTROLLERS = [weather, stations]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep APIDEMO_* variables of the calling shell out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("APIDEMO_"):
            monkeypatch.delenv(name)


@pytest.fixture
def make_config():
    """Factory for settings; keyword arguments override the test defaults."""
    def _make_config(**overrides):
        settings = {
            "env": "testing",
            "security": {"secret_key": "test-secret-key-do-not-use-in-production"},
            "logging": {"level": "WARNING"},
        }
        settings.update(overrides)
        return ApiDemoConfig(**settings)

    return _make_config


@pytest.fixture
def make_app(make_config):
    """Factory for applications serving the sample controllers."""
    def _make_app(**overrides):
        app = create_app(make_config(**overrides), blueprints=CONTROLLERS)
        app.config["TESTING"] = True
        return app

    return _make_app


@pytest.fixture
def app(make_app):
    """Application with the default negotiation settings."""
    return make_app()


@pytest.fixture
def client(app):
    """Test client whose requests arrive through an HTTPS proxy."""
    client = app.test_client()
    client.environ_base["HTTP_X_FORWARDED_PROTO"] = "https"
    return client


@pytest.fixture
def dev_client(make_app):
    """Development test client whose requests arrive through an HTTPS proxy."""
    client = make_app(env="development").test_client()
    client.environ_base["HTTP_X_FORWARDED_PROTO"] = "https"
    return client
