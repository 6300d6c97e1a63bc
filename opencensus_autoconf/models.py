"""
Minimal models for Kubernetes AdmissionReview, Pod and JSONPatch used by this webhook.
We intentionally parse only the fields we need and ignore unknowns so that
new Kubernetes fields don't break this app.

References:
- AdmissionReview request/response shape:
  https://kubernetes.io/docs/reference/access-authn-authz/extensible-admission-controllers/#request-and-response
- Pod (core/v1) API reference:
  https://kubernetes.io/docs/reference/generated/kubernetes-api/latest/#pod-v1-core
- JSON Patch:
  https://datatracker.ietf.org/doc/html/rfc6902
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from kubernetes.client import ApiClient, V1EnvVar

ADMISSION_API_VERSION = "admission.k8s.io/v1"

_api_client = ApiClient()


def _get(d: dict[str, Any], key: str, default):
    # Safe nested getter for dicts
    v = d.get(key)
    return v if isinstance(v, type(default)) else default


@dataclass
class ContainerModel:
    name: str
    # None means the pod spec has no env list at all, which is not the same as [].
    env: list[Any] | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "ContainerModel":
        env = d.get("env")
        return ContainerModel(
            name=_get(d, "name", ""),
            env=env if isinstance(env, list) else None,
        )


@dataclass
class PodModel:
    name: str
    namespace: str
    generate_name: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    containers: list[ContainerModel] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PodModel":
        meta = _get(d, "metadata", {})
        spec = _get(d, "spec", {})
        containers = _get(spec, "containers", [])
        return PodModel(
            name=_get(meta, "name", ""),
            namespace=_get(meta, "namespace", ""),
            generate_name=_get(meta, "generateName", ""),
            annotations=_get(meta, "annotations", {}),
            containers=[
                ContainerModel.from_dict(c if isinstance(c, dict) else {})
                for c in containers
            ],
        )


@dataclass
class AdmissionRequestModel:
    uid: str
    obj: PodModel
    namespace: str = ""
    name: str = ""
    operation: str = "CREATE"

    @staticmethod
    def from_dict(d: dict[str, Any]) -> Optional["AdmissionRequestModel"]:
        if not isinstance(d, dict):
            return None
        obj_raw = d.get("object", {})
        if not isinstance(obj_raw, dict):
            obj_raw = {}
        return AdmissionRequestModel(
            uid=str(d.get("uid", "")),
            obj=PodModel.from_dict(obj_raw),
            namespace=_get(d, "namespace", ""),
            name=_get(d, "name", ""),
            operation=str(d.get("operation", "CREATE")),
        )


@dataclass
class AdmissionReviewModel:
    request: AdmissionRequestModel
    api_version: str = ADMISSION_API_VERSION

    @staticmethod
    def from_dict(d: dict[str, Any]) -> Optional["AdmissionReviewModel"]:
        if not isinstance(d, dict):
            return None
        req_raw = d.get("request")
        req = (
            AdmissionRequestModel.from_dict(req_raw)
            if isinstance(req_raw, dict)
            else None
        )
        if req is None:
            return None
        return AdmissionReviewModel(
            request=req,
            api_version=_get(d, "apiVersion", "") or ADMISSION_API_VERSION,
        )


@dataclass(frozen=True)
class ResourceLabels:
    cluster: str
    namespace: str
    pod: str
    container: str
    deployment: str | None = None


class EmptyList:
    """Patch value that initializes a missing list."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "EMPTY_LIST"


EMPTY_LIST = EmptyList()

PatchValue = Union[str, V1EnvVar, EmptyList]


@dataclass(frozen=True)
class PatchOperation:
    path: str
    value: PatchValue
    op: str = "add"

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "path": self.path, "value": serialize_value(self.value)}


def serialize_value(value: PatchValue) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, V1EnvVar):
        return _api_client.sanitize_for_serialization(value)
    if isinstance(value, EmptyList):
        return []
    raise TypeError(f"unsupported patch value type: {type(value).__name__}")
