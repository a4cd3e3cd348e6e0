import json
import re
from django.utils.deprecation import MiddlewareMixin
from django.conf import settings

_CTRL_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')
_INVISIBLE_RE = re.compile(r'[\u200B-\u200F\u202A-\u202E\u2060-\u206F\uFEFF]')


def clean_value(value):
    """Strip control and zero-width characters from every string in a JSON document.

    Line breaks are normalized to ``\\n`` so that length and line-break rules on
    titles and descriptions see the same text the client typed.
    """
    if isinstance(value, str):
        text = value.replace('\r\n', '\n').replace('\r', '\n')
        return _INVISIBLE_RE.sub('', _CTRL_RE.sub('', text))
    if isinstance(value, list):
        return [clean_value(item) for item in value]
    if isinstance(value, dict):
        return {key: clean_value(item) for key, item in value.items()}
    return value


class SanitizeJsonBodyMiddleware(MiddlewareMixin):
    """Rewrite JSON request bodies with cleaned strings before DRF parses them."""

    def process_request(self, request):
        if not (request.content_type or '').startswith('application/json'):
            return None
        body = request.body
        if not body:
            return None
        try:
            data = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, ValueError):
            # Malformed payloads are reported by the JSON parser with a 400
            return None
        cleaned = clean_value(data)
        if cleaned != data:
            request._body = json.dumps(cleaned).encode('utf-8')
        return None


class SecurityHeadersMiddleware(MiddlewareMixin):
    """Add strict security headers to API responses outside of DEBUG."""

    def process_response(self, request, response):
        if settings.DEBUG:
            return response
        connect = ' '.join(["'self'", *getattr(settings, 'CSP_CONNECT_SRC', [])])
        response.setdefault(
            'Content-Security-Policy',
            f"default-src 'none'; connect-src {connect}; frame-ancestors 'none'; base-uri 'none'",
        )
        response.setdefault('X-Content-Type-Options', 'nosniff')
        response.setdefault('X-Frame-Options', 'DENY')
        response.setdefault('Referrer-Policy', settings.SECURE_REFERRER_POLICY)
        response.setdefault('Cross-Origin-Resource-Policy', 'same-origin')
        return response
