"""JSON renderer wrapping every API payload in ``{success, data, error}``."""

from __future__ import annotations

from rest_framework.renderers import JSONRenderer


class EnvelopeJSONRenderer(JSONRenderer):
    """Wrap responses as ``{"success": true, "data": ...}`` or an error envelope.

    Views keep returning plain payloads, so ``response.data`` in tests is the
    unwrapped body; only the serialized bytes carry the envelope.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = (renderer_context or {}).get("response")
        if response is None or response.status_code == 204:
            return super().render(data, accepted_media_type, renderer_context)

        if response.status_code >= 400:
            body = {"success": False, "error": "Request failed.", "errors": []}
            if isinstance(data, dict):
                body["error"] = data.get("detail", body["error"])
                body["errors"] = data.get("errors", [])
            elif data is not None:
                body["error"] = str(data)
        else:
            body = {"success": True, "data": data}
        return super().render(body, accepted_media_type, renderer_context)
