"""Release pipeline for WebAssembly contracts.

Stages, leaves first: tag -> builder -> optimizer -> packager -> checksums,
with commits/changelog/history alongside and publisher as the join point.
pipeline.py wires them together; toolchain.py, history.py and publisher.py
hold the adapters for cargo, wasm-opt, git and gh.
"""

from __future__ import annotations
