"""Bridge between Python and a developer assistant running as JavaScript in a browser."""

__version__ = "0.1.0"
__all__ = ["binder", "enum_meta", "json_variant", "result_delegate", "utility", "web_api"]