"""Order ingest, trade logging and a JSON HTTP API around a user-supplied matching engine."""

__version__ = "0.1.0"
__all__ = ["models", "wire", "http_api", "service"]