"""Tests for the versioned API explorer and the OpenAPI documents."""

import pytest
from werkzeug.exceptions import NotFound

from api_versioning import ApiVersion
from openapi_spec import generate_openapi_json


def explorer_of(app):
    return app.extensions["api_versioning"].explorer


class TestVersionedApiExplorer:
    def test_version_groups(self, app):
        descriptions = explorer_of(app).api_version_descriptions()
        assert [d.group_name for d in descriptions] == ["v0.9", "v1", "v2"]
        assert [d.deprecated for d in descriptions] == [True, False, False]

    def test_lookup_by_group_name(self, app):
        description = explorer_of(app).get_version_description("v2")
        assert description.api_version == ApiVersion(2, 0)
        assert explorer_of(app).get_version_description("v7") is None

    def test_api_descriptions_of_group(self, app):
        descriptions = explorer_of(app).api_descriptions("v2")
        paths = sorted((d.http_method, d.relative_path) for d in descriptions)
        assert paths == [
            ("GET", "/api/v2/stations/<int:station_id>"),
            ("GET", "/weatherforecast"),
            ("GET", "/weatherforecast/hourly"),
        ]

    def test_version_parameters_from_readers(self, app):
        description = explorer_of(app).api_descriptions("v1")[0]
        assert [(p.name, p.location) for p in description.parameters] == [
            ("x-api-version", "header"),
            ("x-api-version", "query"),
        ]

    def test_version_segment_kept_without_substitution(self, make_app):
        app = make_app(api_explorer={"group_name_format": "v'VVV", "substitute_api_version_in_url": False})
        station = [d for d in explorer_of(app).api_descriptions("v1") if "stations" in d.relative_path][0]
        assert station.relative_path == "/api/v<apiversion:version>/stations/<int:station_id>"
        assert ("version", "path") in [(p.name, p.location) for p in station.parameters]

    def test_group_names_without_format(self, make_app):
        app = make_app(api_explorer={"group_name_format": None})
        assert [d.group_name for d in explorer_of(app).api_version_descriptions()] == ["0.9", "1.0", "2.0"]


class TestOpenAPIDocument:
    """Per-group OpenAPI 3.0 documents."""

    @pytest.fixture
    def document(self, app):
        def _document(group_name):
            with app.test_request_context():
                return generate_openapi_json(app, group_name, "ApiVersioningDemo")
        return _document

    def test_document_header(self, document):
        spec = document("v1")
        assert spec["openapi"] == "3.0.2"
        assert spec["info"]["title"] == "ApiVersioningDemo"
        assert spec["info"]["version"] == "1.0"

    def test_paths_of_group(self, document):
        assert sorted(document("v1")["paths"]) == [
            "/api/v1/stations/{station_id}",
            "/weatherforecast",
            "/weatherforecast/reset",
        ]
        assert "/weatherforecast/hourly" in document("v2")["paths"]

    def test_operation(self, document):
        operation = document("v1")["paths"]["/weatherforecast"]["get"]
        assert operation["summary"] == "Get the five day forecast."
        assert operation["tags"] == ["weatherforecast"]
        assert operation["responses"]["200"]["description"] == "Success"
        assert operation["responses"]["400"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ApiVersionError"
        }

    def test_version_parameters_default_to_default_version(self, document):
        parameters = document("v1")["paths"]["/weatherforecast"]["get"]["parameters"]
        header = [p for p in parameters if p["in"] == "header"][0]
        assert header["name"] == "x-api-version"
        assert header["required"] is False
        assert header["schema"] == {"type": "string", "default": "1.0"}

    def test_non_default_version_parameters_are_required(self, document):
        for path in ("/weatherforecast", "/weatherforecast/hourly", "/api/v2/stations/{station_id}"):
            parameters = document("v2")["paths"][path]["get"]["parameters"]
            header = [p for p in parameters if p["in"] == "header"][0]
            assert header["required"] is True
            assert header["schema"] == {"type": "string", "default": "2.0"}

    def test_version_parameters_required_without_default_assumption(self, make_app):
        app = make_app(api_versioning={"assume_default_version_when_unspecified": False})
        with app.test_request_context():
            spec = generate_openapi_json(app, "v1", "ApiVersioningDemo")
        parameters = spec["paths"]["/weatherforecast"]["get"]["parameters"]
        query = [p for p in parameters if p["in"] == "query"][0]
        assert query["required"] is True
        assert query["schema"]["default"] == "1.0"

    def test_path_parameters(self, document):
        parameters = document("v2")["paths"]["/api/v2/stations/{station_id}"]["get"]["parameters"]
        station_id = [p for p in parameters if p["name"] == "station_id"][0]
        assert station_id["in"] == "path"
        assert station_id["schema"] == {"type": "integer"}

    def test_docstring_operation_is_merged(self, document):
        operation = document("v2")["paths"]["/weatherforecast"]["get"]
        assert operation["responses"]["200"]["description"] == "Forecast entries"
        assert "days" in [p["name"] for p in operation["parameters"]]

    def test_deprecated_group(self, document):
        spec = document("v0.9")
        assert "deprecated" in spec["info"]["description"]
        assert spec["paths"]["/weatherforecast"]["get"]["deprecated"] is True

    def test_error_schema_component(self, document):
        schema = document("v1")["components"]["schemas"]["ApiVersionError"]
        assert set(schema["properties"]) == {"error", "code", "details", "supported_versions"}

    def test_unknown_group(self, app):
        with app.test_request_context():
            with pytest.raises(NotFound):
                generate_openapi_json(app, "v7", "ApiVersioningDemo")
