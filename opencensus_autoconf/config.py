import os
from dataclasses import dataclass

VERSION = "0.0.1"


def _get_env(name: str, default: str) -> str:
    val = os.getenv(name)
    return val if val is not None and val != "" else default


def _parse_int(name: str, default: int) -> int:
    val = _get_env(name, str(default))
    try:
        return int(val)
    except Exception:
        return default


def _parse_flag(name: str, default: bool) -> bool:
    val = _get_env(name, "true" if default else "false")
    return val.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # Behavior
    cluster_name: str = ""
    configure_default: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8443
    tls_cert_file: str = "/etc/tls/cert.pem"
    tls_key_file: str = "/etc/tls/key.pem"

    # Set by the cluster user to explicitly enable or disable configuration.
    configure_annotation: str = "opencensus.io/configure"


def load() -> Settings:
    return Settings(
        cluster_name=_get_env("CLUSTER_NAME", ""),
        configure_default=_parse_flag("CONFIGURE_DEFAULT", False),
        host=_get_env("HOST", "0.0.0.0"),
        port=_parse_int("PORT", 8443),
        tls_cert_file=_get_env("TLS_CERT_FILE", "/etc/tls/cert.pem"),
        tls_key_file=_get_env("TLS_KEY_FILE", "/etc/tls/key.pem"),
        configure_annotation=_get_env(
            "CONFIGURE_ANNOTATION", "opencensus.io/configure"
        ),
    )
