"""
Contrib modules for rest-query-engine.

This package contains optional integrations with third-party libraries.
Each contrib module is an optional dependency and won't be loaded unless
the required packages are installed.

Available contrib modules:
- opentelemetry: OpenTelemetry tracing and metrics per send attempt
"""
