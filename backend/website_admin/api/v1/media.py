from flask import request, jsonify
from website_admin.domain.permissions import MEDIA_UPLOAD
from website_admin.utils.audit import log_action
from website_admin.utils.decorators import current_user_required, permissions_required
from website_admin.utils.media import save_file
from website_admin.utils.transaction import transactional
from . import api_bp


@api_bp.route("/admin/website/media", methods=["POST"])
@current_user_required
@permissions_required(MEDIA_UPLOAD)
def upload_media():
    file = request.files.get("file")

    try:
        stored = save_file(file)
    except ValueError as e:
        return jsonify({"error": "Upload failed", "message": str(e)}), 400

    with transactional():
        log_action(
            action="media.upload",
            entity_type="media",
            entity_id=stored["url"],
            payload={"filename": stored["filename"], "size": stored["size"]},
        )

    return jsonify({"data": stored}), 201
