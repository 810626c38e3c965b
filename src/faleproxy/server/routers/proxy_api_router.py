import logging
from flask import Blueprint, jsonify, request, current_app

from faleproxy.errors import FaleproxyError

logger = logging.getLogger(__name__)

proxy_api_router = Blueprint('proxy_api_router', __name__)


# --- HELPER FUNCTIONS ---

def get_proxy_controller():
    """Retrieves the proxy controller from the Flask application context."""
    controller = current_app.config.get('PROXY_CONTROLLER')
    if not controller:
        raise RuntimeError("ProxyController is not set in app.config['PROXY_CONTROLLER']")
    return controller


def _request_payload() -> dict:
    """Accepts both JSON and form-encoded bodies."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _is_truthy(value) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes", "on")
    return bool(value)


# --- API ROUTES ---

@proxy_api_router.route('/fetch', methods=['POST'])
def fetch_page():
    """
    Fetches the requested URL and returns the rewritten page.
    Body: {"url": "...", "includeLinks": false}
    """
    controller = get_proxy_controller()
    payload = _request_payload()

    try:
        result = controller.fetch_and_transform(payload.get('url'))
        body = result.to_response()

        if _is_truthy(payload.get('includeLinks')):
            proxy_origin = request.host_url.rstrip('/')
            body['links'] = [
                plan.model_dump(by_alias=True, exclude_none=True)
                for plan in controller.plan_links(result, proxy_origin)
            ]
        return jsonify(body)

    except FaleproxyError as e:
        if e.http_status >= 500:
            logger.error("Error fetching URL %r: %s", payload.get('url'), e.detail)
        return jsonify(controller.error_response(e)), e.http_status

    except Exception as e:
        logger.error("Unexpected error for URL %r: %s", payload.get('url'), e, exc_info=True)
        return jsonify({"error": f"Failed to fetch content: {e}"}), 500


@proxy_api_router.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"})
