# Middleware package init
"""
Project Library Backend - Middleware Package
=============================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID: correlation ID for logs, error bodies and X-Request-ID;
       outermost so even 429 responses carry it
    2. Rate Limit: reject abusive clients before any route work
    3. Logging: method, path, status and duration with the request ID
"""
