from flask import jsonify, request, send_from_directory
from website_admin.application.pages.history import latest_published
from website_admin.application.pages.preview_page import resolve_preview
from website_admin.normalizers.page import normalize_public_page
from website_admin.utils.media import media_folder
from . import api_bp, site_bp


@api_bp.route("/website/pages/<slug>", methods=["GET"])
def get_published_page(slug):
    version = latest_published(slug=slug)
    return jsonify({"data": normalize_public_page(version)}), 200


@site_bp.route("/preview/<slug>", methods=["GET"])
def preview(slug):
    snapshot = resolve_preview(slug=slug, draft_id=request.args.get("draftId"))
    return jsonify({"data": snapshot, "preview": True}), 200


@site_bp.route("/media/<path:filename>", methods=["GET"])
def media(filename):
    return send_from_directory(media_folder(), filename)
