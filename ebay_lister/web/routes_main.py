"""
routes_main.py
Listing API routes: uploads, analyze, refine, manual edits, history
"""

import logging

from flask import Blueprint, jsonify, request

from ..ai.listing_requests import ImageBlob
from ..exceptions import (
    InputError,
    ListingError,
    ListingParseError,
    ListingValidationError,
    SessionBusyError,
    TransportError,
)

logger = logging.getLogger(__name__)

# Create blueprint
main_bp = Blueprint('main', __name__)

# session will be set by init_routes() in create_app()
listing_session = None


def init_routes(session):
    """Initialize routes with the listing session"""
    global listing_session
    listing_session = session


def _error_status(error: ListingError) -> int:
    if isinstance(error, InputError):
        return 400
    if isinstance(error, SessionBusyError):
        return 409
    if isinstance(error, TransportError):
        return 502
    if isinstance(error, (ListingParseError, ListingValidationError)):
        return 422
    return 500


def _error_response(error: ListingError):
    return jsonify({"success": False, "error": str(error)}), _error_status(error)


def _uploaded_images():
    return [
        ImageBlob(data=f.read(), mime_type=f.mimetype, filename=f.filename)
        for f in request.files.getlist("images")
        if f and f.filename
    ]


# -------------------------------------------------------------------------
# STATE
# -------------------------------------------------------------------------

@main_bp.route("/api/state", methods=["GET"])
def api_state():
    return jsonify(listing_session.snapshot())


# -------------------------------------------------------------------------
# UPLOADS
# -------------------------------------------------------------------------

@main_bp.route("/api/images", methods=["POST"])
def api_upload_images():
    """Replace the working product photos"""
    images = _uploaded_images()
    if not images:
        return jsonify({"success": False, "error": "No photos provided"}), 400
    try:
        listing_session.set_images(images)
    except ListingError as e:
        return _error_response(e)
    return jsonify({"success": True, "image_count": len(images)})


@main_bp.route("/api/categories", methods=["POST"])
def api_upload_categories():
    """Load 1 or 2 eBay category CSV exports"""
    files = [(f.filename, f.read()) for f in request.files.getlist("files") if f and f.filename]
    try:
        categories = listing_session.load_category_files(files)
    except ListingError as e:
        return _error_response(e)
    return jsonify({
        "success": True,
        "files": [name for name, _ in files],
        "category_count": len(categories),
    })


# -------------------------------------------------------------------------
# ANALYZE / REFINE
# -------------------------------------------------------------------------

@main_bp.route("/api/analyze", methods=["POST"])
def api_analyze():
    """Generate a listing from the uploaded photos (photos may come with this request)"""
    try:
        images = _uploaded_images()
        if images:
            listing_session.set_images(images)
        listing = listing_session.analyze()
    except ListingError as e:
        return _error_response(e)

    if listing is None:
        return jsonify({"success": False, "error": "Session was cleared while analyzing."}), 409
    return jsonify({"success": True, "listing": listing.model_dump(mode="json")})


@main_bp.route("/api/refine", methods=["POST"])
def api_refine():
    """Apply a natural-language change to the active listing"""
    data = request.get_json(silent=True) or {}
    instruction = data.get("instruction") or ""
    try:
        listing = listing_session.refine(instruction)
    except ListingError as e:
        return _error_response(e)

    if listing is None:
        return jsonify({"success": False, "error": "Listing changed while refining."}), 409
    return jsonify({"success": True, "listing": listing.model_dump(mode="json")})


# -------------------------------------------------------------------------
# ACTIVE LISTING
# -------------------------------------------------------------------------

@main_bp.route("/api/listing", methods=["PATCH"])
def api_update_listing():
    """Manual edits, applied as-is"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({"success": False, "error": "No changes provided"}), 400
    try:
        listing = listing_session.update_listing(data)
    except ListingError as e:
        return _error_response(e)
    return jsonify({"success": True, "listing": listing.model_dump(mode="json", warnings=False)})


@main_bp.route("/api/listing/export", methods=["GET"])
def api_export_listing():
    """Plain-text blocks for copy and paste into eBay"""
    listing = listing_session.listing
    if listing is None:
        return jsonify({"success": False, "error": "No active listing"}), 404
    return jsonify({"success": True, "blocks": listing.export_blocks()})


@main_bp.route("/api/clear", methods=["POST"])
def api_clear():
    listing_session.clear()
    return jsonify({"success": True})


# -------------------------------------------------------------------------
# HISTORY
# -------------------------------------------------------------------------

@main_bp.route("/api/history", methods=["GET"])
def api_history():
    return jsonify({
        "success": True,
        "history": [item.model_dump(mode="json") for item in listing_session.history],
    })


@main_bp.route("/api/history/<listing_id>/load", methods=["POST"])
def api_load_history(listing_id):
    listing = listing_session.load_from_history(listing_id)
    if listing is None:
        return jsonify({"success": False, "error": "Listing not found"}), 404
    return jsonify({"success": True, "listing": listing.model_dump(mode="json")})


@main_bp.route("/api/history", methods=["DELETE"])
def api_clear_history():
    listing_session.clear_history()
    return jsonify({"success": True})
