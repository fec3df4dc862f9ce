"""Application bootstrap: API versioning, OpenAPI documents and the request pipeline."""

import argparse
import logging
import sys
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

from flask import Blueprint, Flask, jsonify
from flask_login import LoginManager
from flask_talisman import Talisman

from api_versioning import (
    ApiExplorerOptions,
    ApiVersion,
    ApiVersioningOptions,
    add_versioning_middleware,
    reader_from_config,
)
from config import ApiDemoConfig, ApiExplorerConfig, ApiVersioningConfig, get_config, load_config, validate_config
from exceptions import ConfigurationError
from log_utils import init_request_logging, setup_logging_from_config
from openapi_spec import create_swagger_endpoints

logger = logging.getLogger(__name__)


def build_versioning_options(section: ApiVersioningConfig) -> ApiVersioningOptions:
    """Translate the ``api_versioning`` settings into negotiation options.

    Raises:
        ConfigurationError: for an unparsable default version or reader list
    """
    try:
        default_version = ApiVersion.parse(section.default_api_version)
    except ValueError as e:
        raise ConfigurationError("api_versioning.default_api_version", str(e)) from e

    try:
        reader = reader_from_config(section.api_version_readers)
    except ValueError as e:
        raise ConfigurationError("api_versioning.api_version_readers", str(e)) from e

    return ApiVersioningOptions(
        default_api_version=default_version,
        assume_default_version_when_unspecified=section.assume_default_version_when_unspecified,
        report_api_versions=section.report_api_versions,
        api_version_reader=reader,
    )


def build_explorer_options(section: ApiExplorerConfig) -> ApiExplorerOptions:
    return ApiExplorerOptions(
        group_name_format=section.group_name_format,
        substitute_api_version_in_url=section.substitute_api_version_in_url,
    )


def init_security(app: Flask, config: ApiDemoConfig) -> Talisman:
    """HTTPS redirection and security headers."""
    return Talisman(
        app,
        force_https=config.security.force_https,
        force_https_permanent=config.security.force_https_permanent,
        strict_transport_security=config.security.strict_transport_security,
        frame_options="DENY",
        content_security_policy=None,
        referrer_policy="strict-origin-when-cross-origin",
    )


def init_authorization(app: Flask) -> LoginManager:
    """Install the authorization stage.

    No authentication scheme is configured, so no request ever carries a
    user and routes protected with ``login_required`` answer 401.
    """
    login_manager = LoginManager(app)

    @login_manager.user_loader
    def load_user(user_id):
        return None

    @login_manager.request_loader
    def load_user_from_request(req):
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required", "code": "UNAUTHORIZED"}), 401

    return login_manager


def map_controllers(app: Flask, blueprints: Iterable[Blueprint]) -> None:
    for blueprint in blueprints:
        app.register_blueprint(blueprint)
        logger.debug(f"Mapped controller blueprint '{blueprint.name}'")


def create_app(config: Optional[ApiDemoConfig] = None, blueprints: Sequence[Blueprint] = ()) -> Flask:
    """Build the application.

    Args:
        config: Settings to use; defaults to :func:`config.get_config`
        blueprints: Controller blueprints declaring versioned routes

    Raises:
        ConfigurationError: if the versioning settings cannot be applied
    """
    config = config or get_config()
    setup_logging_from_config(config.logging)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.security.secret_key
    app.debug = config.debug
    app.extensions["apidemo_config"] = config

    versioning = add_versioning_middleware(app, build_versioning_options(config.api_versioning))
    versioning.add_versioned_api_explorer(build_explorer_options(config.api_explorer))

    init_request_logging(app)

    if config.is_development:
        create_swagger_endpoints(
            app,
            title=config.swagger.title,
            route_prefix=config.swagger.route_prefix,
            info_description=config.swagger.description,
        )

    init_security(app, config)
    init_authorization(app)
    map_controllers(app, blueprints)

    report = versioning.registry.generate_endpoint_report()
    logger.info(
        f"Application created for '{config.env}' with {report['total_endpoints']} versioned endpoints "
        f"across versions {sorted(report['by_version'])}"
    )
    return app


def parse_urls(urls: Optional[str], config: ApiDemoConfig):
    """Turn ``--urls`` into ``(host, port, ssl_context)``.

    Only the first of several ``;``-separated URLs is served.
    """
    server = config.server
    if not urls:
        ssl_context = (server.ssl_certfile, server.ssl_keyfile) if server.ssl_certfile else None
        return server.host, server.port, ssl_context

    url = urlsplit(urls.split(";")[0].strip())
    if url.scheme not in ("http", "https") or not url.hostname:
        raise ConfigurationError("urls", f"unsupported listen URL {urls!r}")

    ssl_context = None
    if url.scheme == "https":
        if not (server.ssl_certfile and server.ssl_keyfile):
            raise ConfigurationError("urls", "https listeners need server.ssl_certfile and server.ssl_keyfile")
        ssl_context = (server.ssl_certfile, server.ssl_keyfile)

    port = url.port or (443 if url.scheme == "https" else 80)
    return url.hostname, port, ssl_context


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="api-versioning-demo", description="Run the API versioning demo service")
    parser.add_argument("--environment", help="Hosting environment (development, testing, staging, production)")
    parser.add_argument("--urls", help="Listen URLs separated by ';', e.g. http://localhost:5000")
    parser.add_argument("--config", help="JSON configuration file")
    args = parser.parse_args(argv)

    try:
        config = load_config(config_file=args.config, environment=args.environment)
        for error in validate_config(config):
            logger.warning(f"Configuration: {error}")
        host, port, ssl_context = parse_urls(args.urls, config)
        app = create_app(config)
    except ConfigurationError as e:
        logging.basicConfig()
        logger.critical(f"Startup failed: {e.message}", extra={"custom_error": e.to_dict()})
        return 1

    app.run(host=host, port=port, ssl_context=ssl_context, debug=config.debug, use_reloader=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
