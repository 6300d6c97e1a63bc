import base64
import json
import logging
from typing import Any

from kubernetes.client import V1EnvVar

from .models import (
    ADMISSION_API_VERSION,
    EMPTY_LIST,
    PatchOperation,
    PodModel,
    ResourceLabels,
)
from .names import derive_deployment_name, resolve_name

log = logging.getLogger("opencensus-autoconf")

# OpenCensus resource environment variables and keys.
ENV_VAR_TYPE = "OC_RESOURCE_TYPE"
ENV_VAR_LABELS = "OC_RESOURCE_LABELS"
CONTAINER_TYPE = "container"

K8S_CLUSTER_NAME = "k8s.cluster.name"
K8S_NAMESPACE_NAME = "k8s.namespace.name"
K8S_POD_NAME = "k8s.pod.name"
CONTAINER_NAME = "container.name"
K8S_DEPLOYMENT_NAME = "k8s.deployment.name"

_TRUE_VALUES = ("1", "t", "true")
_FALSE_VALUES = ("0", "f", "false")


def parse_bool(raw: str) -> bool | None:
    """Return the boolean a literal spells, or None if it isn't one."""
    val = raw.lower()
    if val in _TRUE_VALUES:
        return True
    if val in _FALSE_VALUES:
        return False
    return None


def should_configure(annotation: str | None, default: bool, pod_ref: str = "") -> bool:
    """
    Decide whether a pod gets configured: an explicit boolean annotation wins,
    otherwise the operator-wide default applies. Unparsable values are logged
    and treated like a missing annotation.
    """
    if annotation is None or annotation == "":
        return default

    parsed = parse_bool(str(annotation))
    if parsed is None:
        log.warning(
            "Invalid value %r for configure annotation on pod %s, continuing with default %s",
            annotation,
            pod_ref,
            default,
        )
        return default
    return parsed


def encode_labels(labels: ResourceLabels) -> str:
    """Serialize resource labels into the OC_RESOURCE_LABELS format."""
    pairs = [
        (K8S_CLUSTER_NAME, labels.cluster),
        (K8S_NAMESPACE_NAME, labels.namespace),
        (K8S_POD_NAME, labels.pod),
        (CONTAINER_NAME, labels.container),
    ]
    if labels.deployment:
        pairs.append((K8S_DEPLOYMENT_NAME, labels.deployment))
    return ",".join(f"{k}={json.dumps(v, ensure_ascii=False)}" for k, v in pairs)


def build_patch(
    cluster_name: str, request_namespace: str, request_name: str, pod: PodModel
) -> list[PatchOperation]:
    """
    Produce the JSONPatch that sets the OpenCensus resource env vars on every
    container. Operations apply in order against the original pod. Raises
    NoNameError if the pod has neither a name nor a generateName.
    """
    namespace, name, generated = resolve_name(pod, request_namespace, request_name)

    patch: list[PatchOperation] = []
    if generated:
        patch.append(PatchOperation(path="/metadata/name", value=name))

    deployment = derive_deployment_name(name)

    for i, container in enumerate(pod.containers):
        path = f"/spec/containers/{i}/env"

        # The list must exist before we can append to it.
        if container.env is None:
            patch.append(PatchOperation(path=path, value=EMPTY_LIST))

        # Env vars the user already set under these names are not removed; the
        # annotation is the way to opt out of configuration.
        labels = ResourceLabels(
            cluster=cluster_name,
            namespace=namespace,
            pod=name,
            container=container.name,
            deployment=deployment,
        )
        patch.append(
            PatchOperation(
                path=path + "/-",
                value=V1EnvVar(name=ENV_VAR_TYPE, value=CONTAINER_TYPE),
            )
        )
        patch.append(
            PatchOperation(
                path=path + "/-",
                value=V1EnvVar(name=ENV_VAR_LABELS, value=encode_labels(labels)),
            )
        )

    return patch


def make_admission_response(
    uid: str,
    allowed: bool = True,
    patch: list[PatchOperation] | None = None,
    message: str | None = None,
    api_version: str = ADMISSION_API_VERSION,
) -> dict[str, Any]:
    """Return the AdmissionReview the webhook sends to K8s to allow, deny or patch a Pod."""
    resp: dict[str, Any] = {"uid": uid, "allowed": allowed}

    if patch:
        resp["patchType"] = "JSONPatch"
        resp["patch"] = base64.b64encode(
            json.dumps([op.to_dict() for op in patch]).encode()
        ).decode()

    if message:
        resp["status"] = {"message": message}

    return {
        "apiVersion": api_version,
        "kind": "AdmissionReview",
        "response": resp,
    }
