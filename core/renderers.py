"""
ClinicStock — Response Renderer

Successful responses go out as ``{"success": true, "data": ..., "meta": ...}``.
Error bodies are already shaped by the exception handler and pass through.

@file core/renderers.py
"""

from rest_framework.renderers import JSONRenderer

PAGE_META_KEYS = ('count', 'page', 'per_page', 'total_pages', 'next', 'previous')


class StandardJSONRenderer(JSONRenderer):

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None

        if response is not None:
            if response.status_code == 204:
                return b''
            if response.status_code >= 400:
                return super().render(data, accepted_media_type, renderer_context)

        if isinstance(data, dict) and 'success' in data:
            return super().render(data, accepted_media_type, renderer_context)

        if isinstance(data, dict) and 'results' in data:
            envelope = {
                'success': True,
                'data': data['results'],
                'meta': {key: data[key] for key in PAGE_META_KEYS if key in data},
            }
        else:
            envelope = {'success': True, 'data': data}

        return super().render(envelope, accepted_media_type, renderer_context)
