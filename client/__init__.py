"""client/ -- HTTP client for the SessionGate backend.

Layer rule: client/ imports only stdlib + third-party libraries. It does NOT
import from api/, auth/, or core/.
"""
