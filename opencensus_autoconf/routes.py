import logging

from flask import Blueprint, jsonify, request

from .config import VERSION
from .helpers import build_patch, make_admission_response, should_configure
from .models import ADMISSION_API_VERSION, AdmissionReviewModel
from .names import NoNameError, effective_identity

log = logging.getLogger("opencensus-autoconf")


def create_routes(settings):
    bp = Blueprint("webhook", __name__)

    @bp.route("/health", methods=["GET"])
    def health():
        return {"status": "healthy", "version": VERSION}, 200

    @bp.route("/autoconf", methods=["POST"])
    @bp.route("/mutate", methods=["POST"])
    def autoconf():
        uid = ""
        api_version = ADMISSION_API_VERSION
        try:
            review_json = request.get_json(silent=True)

            admission = AdmissionReviewModel.from_dict(review_json or {})
            if admission is None:
                log.warning("Invalid AdmissionReview payload for /autoconf")
                return (
                    jsonify(
                        make_admission_response(
                            uid="",
                            allowed=False,
                            message="invalid AdmissionReview payload",
                        )
                    ),
                    400,
                )

            req = admission.request
            uid = req.uid
            api_version = admission.api_version
            pod = req.obj

            if req.operation != "CREATE":
                return jsonify(
                    make_admission_response(uid, True, api_version=api_version)
                )

            ns, name = effective_identity(pod, req.namespace, req.name)
            pod_ref = f"{ns}/{name or pod.generate_name}"

            configure = should_configure(
                pod.annotations.get(settings.configure_annotation),
                settings.configure_default,
                pod_ref,
            )
            if not configure:
                log.debug("Skipping pod %s", pod_ref)
                return jsonify(
                    make_admission_response(uid, True, api_version=api_version)
                )

            log.info("Configuring pod %s", pod_ref)
            try:
                patch = build_patch(settings.cluster_name, req.namespace, req.name, pod)
            except NoNameError as e:
                log.error("Denying pod %s: %s", pod_ref, e)
                return jsonify(
                    make_admission_response(
                        uid, False, message=str(e), api_version=api_version
                    )
                )

            log.info(
                "Patching pod %s with %d operations across %d containers",
                pod_ref,
                len(patch),
                len(pod.containers),
            )
            return jsonify(
                make_admission_response(uid, True, patch, api_version=api_version)
            )
        except Exception as e:
            log.error("Error in /autoconf", exc_info=True)
            return (
                jsonify(
                    make_admission_response(
                        uid=uid, allowed=False, message=str(e), api_version=api_version
                    )
                ),
                500,
            )

    return bp
