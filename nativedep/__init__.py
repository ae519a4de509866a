"""
nativedep - native dependency acquisition for host builds.

Decides at build time whether a native library is already installed, can be
fetched as a prebuilt archive, or must be built from source, and emits the
linker directives for whichever path succeeded.

The pipeline entry point is ``nativedep.acquire.acquire``.
"""

__version__ = "0.1.0"
