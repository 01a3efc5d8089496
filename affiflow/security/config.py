"""Security configuration and middleware."""

from flask import abort, request

MAX_REQUEST_BYTES = 1024 * 1024

PASSWORD_POLICY = {
    'min_length': 8,
    'require_uppercase': True,
    'require_lowercase': True,
    'require_digits': True,
}

# Video embeds are the only third-party frames a page may load
FRAME_SOURCES = "https://www.youtube.com https://www.tiktok.com https://www.instagram.com"


def configure_security_headers(app):
    """Configure security headers."""

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        if not request.path.startswith('/api/'):
            csp_directives = [
                "default-src 'self'",
                "style-src 'self' 'unsafe-inline'",
                "img-src 'self' data: https:",
                f"frame-src {FRAME_SOURCES}",
                "frame-ancestors 'none'",
                "base-uri 'self'",
                "form-action 'self'",
            ]
            response.headers['Content-Security-Policy'] = "; ".join(csp_directives)

        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    return app


def configure_secure_session(app):
    """Session cookies: signed, fixed lifetime, HTTPS-only outside development."""
    if app.config.get('SESSION_COOKIE_SECURE') is None:
        app.config['SESSION_COOKIE_SECURE'] = not (app.debug or app.testing)
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        REMEMBER_COOKIE_HTTPONLY=True,
        SESSION_REFRESH_EACH_REQUEST=False,
        PERMANENT_SESSION_LIFETIME=app.config.get('SESSION_LIFETIME_SECONDS', 30 * 24 * 3600),
    )
    return app


def validate_input_length(app):
    """Reject request payloads larger than 1 MB."""

    @app.before_request
    def limit_request_size():
        if request.content_length and request.content_length > MAX_REQUEST_BYTES:
            abort(413)

    return app


def is_password_strong(password: str) -> tuple[bool, str]:
    """Validate password against policy."""
    policy = PASSWORD_POLICY

    if len(password) < policy['min_length']:
        return False, f"Password must be at least {policy['min_length']} characters long"

    if policy['require_uppercase'] and not any(c.isupper() for c in password):
        return False, "Password must contain at least one uppercase letter"

    if policy['require_lowercase'] and not any(c.islower() for c in password):
        return False, "Password must contain at least one lowercase letter"

    if policy['require_digits'] and not any(c.isdigit() for c in password):
        return False, "Password must contain at least one digit"

    return True, "Password meets requirements"


def auth_rate_limit():
    """Rate limit for credential endpoints."""
    return "5 per minute"


__all__ = [
    'configure_security_headers',
    'configure_secure_session',
    'validate_input_length',
    'is_password_strong',
    'auth_rate_limit',
]
