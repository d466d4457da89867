"""
Riskify SWMS Application - Backend API

Flask application that turns SWMS form data into compliance documents
(PDF export and HTML preview).
"""

import logging
from datetime import datetime
from functools import lru_cache

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

import config
from catalog import Catalogs, load_catalogs
from document_builder import RenderOptions
from errors import CatalogError
from renderer import RenderResult, render_swms
from risk import SCALES, classify, get_scale

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
CORS(app)  # Enable CORS for frontend

# HTTP status for each render error kind
STATUS_CODES = {
    "invalid_document": 400,
    "unknown_catalog_id": 422,
    "catalog_error": 500,
    "oversized_document": 413,
}


@lru_cache(maxsize=1)
def get_catalogs() -> Catalogs:
    """Load the fixed catalogs once; failures are retried on the next request."""
    return load_catalogs(config.CATALOG_DIR)


def _error_response(kind: str, message: str, section=None, status: int = None):
    return jsonify({"error": kind, "message": message, "section": section}), status or STATUS_CODES.get(kind, 500)


def _render_request(output_format: str):
    """
    Shared body of the preview and export endpoints.

    Returns:
        Tuple of (RenderResult, None) on a completed render, or (None, error response)
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return None, _error_response("invalid_document", "Request body must be a JSON object")

    try:
        options = RenderOptions.from_config(scale=get_scale(request.args.get('scale', config.RISK_SCALE)))
    except ValueError as e:
        return None, _error_response("invalid_document", str(e))

    try:
        catalogs = get_catalogs()
    except CatalogError as e:
        logger.error(f"Catalogs unavailable: {e}")
        return None, _error_response(e.kind, str(e), e.section)

    result = render_swms(payload, output_format, options=options, catalogs=catalogs)
    if not result.ok:
        return None, _error_response(result.error_kind, result.error_message, result.error_section)
    return result, None


def _result_headers(result: RenderResult) -> dict:
    return {
        'X-SWMS-Page-Count': str(result.page_count),
        'X-SWMS-Warning-Count': str(len(result.warnings)),
    }


@app.errorhandler(413)
def payload_too_large(e):
    return _error_response("oversized_document", f"Request body exceeds {config.MAX_CONTENT_LENGTH} bytes")


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat()
    })


@app.route('/api/catalogs', methods=['GET'])
def get_catalog_data():
    """HRCW categories and PPE items with their catalog versions."""
    try:
        catalogs = get_catalogs()
    except CatalogError as e:
        logger.error(f"Catalogs unavailable: {e}")
        return _error_response(e.kind, str(e), e.section)
    return jsonify(catalogs.to_dict()), 200


@app.route('/api/risk/classify', methods=['GET'])
def classify_score():
    """
    Classify a risk score for the form UI.

    Query params:
        score: Raw score (required)
        scale: "5x5" (default) or "4x4"
    """
    score = request.args.get('score')
    if score is None:
        return jsonify({"error": "score query parameter is required"}), 400
    try:
        scale = get_scale(request.args.get('scale', config.RISK_SCALE))
    except ValueError as e:
        return jsonify({"error": str(e), "available": sorted(SCALES)}), 400

    result = classify(score, scale)
    return jsonify({
        "scale": scale.name,
        "score": result.score,
        "tier": result.tier.value,
        "label": result.label,
        "color": result.color,
        "text_color": result.text_color,
        "clamped": result.clamped,
    }), 200


@app.route('/api/swms/preview', methods=['POST'])
def preview_swms():
    """Render the posted SWMS document as an HTML preview."""
    try:
        result, error = _render_request("html")
        if error is not None:
            return error
        return Response(result.content, mimetype='text/html', headers=_result_headers(result))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating SWMS preview: {e}", exc_info=True)
        return jsonify({
            "error": "Failed to generate preview",
            "message": str(e)
        }), 500


@app.route('/api/swms/export/pdf', methods=['POST'])
def export_swms_pdf():
    """Render the posted SWMS document as a downloadable PDF."""
    try:
        result, error = _render_request("pdf")
        if error is not None:
            return error

        payload = request.get_json(silent=True) or {}
        project_name = payload.get('projectName') or payload.get('jobName') or 'document'
        base_name = secure_filename(str(project_name)) or 'document'
        timestamp = datetime.utcnow().strftime("%Y%m%d")
        filename = f"SWMS_{base_name}_{timestamp}.pdf"

        headers = _result_headers(result)
        headers['Content-Disposition'] = f'attachment; filename="{filename}"'
        return Response(result.content, mimetype='application/pdf', headers=headers)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating SWMS PDF: {e}", exc_info=True)
        return jsonify({
            "error": "Failed to generate PDF",
            "message": str(e)
        }), 500


if __name__ == '__main__':
    print("Starting Riskify SWMS Application...")
    port = config.BACKEND_PORT
    print(f"Backend API running on http://localhost:{port}")
    print(f"API Documentation: http://localhost:{port}/api/health")
    print(f"Catalogs: {config.CATALOG_DIR}")
    app.run(debug=True, host='0.0.0.0', port=port)
