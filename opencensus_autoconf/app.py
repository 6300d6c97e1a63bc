"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: MIT-0
"""
import logging
import os

from flask import Flask

from .config import VERSION, Settings, load
from .routes import create_routes

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
log = logging.getLogger("opencensus-autoconf")


def create_app(settings: Settings | None = None) -> Flask:
    if settings is None:
        settings = load()

    flask_app = Flask(__name__)
    flask_app.register_blueprint(create_routes(settings))
    log.info(
        "Autoconf webhook %s ready (cluster=%r configure_default=%s annotation=%s)",
        VERSION,
        settings.cluster_name,
        settings.configure_default,
        settings.configure_annotation,
    )
    return flask_app


settings: Settings = load()
app = create_app(settings)

if __name__ == "__main__":
    log.info("Starting webhook server...")
    app.run(
        host=settings.host,
        port=settings.port,
        ssl_context=(settings.tls_cert_file, settings.tls_key_file),
    )
