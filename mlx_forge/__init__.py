# Lazy import to avoid loading the CLI stack during package import
__version__ = "1.0.0"
__all__ = ["MLXForgeAPI", "ConversionRequest", "QuantizationLevel", "app"]


def __getattr__(name):
    if name == "MLXForgeAPI":
        from .api import MLXForgeAPI

        return MLXForgeAPI
    elif name == "ConversionRequest":
        from .converter import ConversionRequest

        return ConversionRequest
    elif name == "QuantizationLevel":
        from .converter import QuantizationLevel

        return QuantizationLevel
    elif name == "app":
        from .cli import app

        return app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
