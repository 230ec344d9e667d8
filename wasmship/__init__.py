"""wasmship: tag-triggered release pipeline for WebAssembly contracts."""

__version__ = "0.1.0"
