"""
SPIFFE Entry - Workload registration entry derivation

Derives SPIRE registration entries for Kubernetes pods from declarative
identity templates (ClusterSPIFFEID), enforcing SPIFFE ID, DNS name and
selector invariants.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
