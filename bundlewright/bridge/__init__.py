"""Bridges to remote artifact stores.

``HttpExistenceProbe`` checks a public HTTP(S) store with HEAD requests
and satisfies the ``ExistenceProbe`` protocol used by the reconciler.
"""

from bundlewright.bridge.http_probe import HttpExistenceProbe

__all__ = ["HttpExistenceProbe"]
