import logging
import random
import re
from typing import NamedTuple

from .models import PodModel

log = logging.getLogger("opencensus-autoconf")

# Limits and alphabet match the API server's generateName handling.
MAX_NAME_LENGTH = 63
RANDOM_SUFFIX_LENGTH = 5
MAX_GENERATED_PREFIX_LENGTH = MAX_NAME_LENGTH - RANDOM_SUFFIX_LENGTH
SUFFIX_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"

# [deployment-name]-[replicaset-suffix]-[pod-suffix]
DEPLOYMENT_POD_NAME = re.compile(r"(.*)-([0-9a-zA-Z]*)-([0-9a-zA-Z]*)")


class NoNameError(ValueError):
    def __init__(
        self, message: str = "unable to configure pod without name or generate name"
    ) -> None:
        super().__init__(message)


class ResolvedName(NamedTuple):
    namespace: str
    name: str
    generated: bool = False


def effective_identity(
    pod: PodModel, request_namespace: str, request_name: str
) -> tuple[str, str]:
    """Namespace and name from the pod object, falling back to the request's."""
    namespace = pod.namespace or request_namespace or ""
    name = pod.name or request_name or ""
    return namespace, name


def generate_name(prefix: str) -> str:
    if len(prefix) > MAX_GENERATED_PREFIX_LENGTH:
        prefix = prefix[:MAX_GENERATED_PREFIX_LENGTH]
    suffix = "".join(
        random.choice(SUFFIX_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH)
    )
    return prefix + suffix


def resolve_name(
    pod: PodModel, request_namespace: str, request_name: str
) -> ResolvedName:
    """
    Determine the pod's namespace and name. When neither the pod nor the request
    carries a name yet, pick one from the pod's generateName prefix the way the
    API server would. Raises NoNameError if there is nothing to go on.
    """
    namespace, name = effective_identity(pod, request_namespace, request_name)
    if name:
        return ResolvedName(namespace, name)

    if not pod.generate_name:
        raise NoNameError()

    name = generate_name(pod.generate_name)
    log.info("Generated name %s for pod with generateName=%s", name, pod.generate_name)
    return ResolvedName(namespace, name, generated=True)


def derive_deployment_name(pod_name: str) -> str | None:
    """Best-effort guess of the owning deployment from the pod naming convention."""
    match = DEPLOYMENT_POD_NAME.fullmatch(pod_name or "")
    if match is None:
        return None
    return match.group(1) or None
