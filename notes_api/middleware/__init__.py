# Middleware package init
"""
Notes API: Middleware Package
================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    Request ID runs first so the logging middleware and the exception
    handlers can tag every log line with the same correlation ID.
"""
