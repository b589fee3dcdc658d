"""
Command line flags whose values can also come from the config file.
"""

from toolsconf.flags.cluster import CLUSTER_SECTION, ClusterFlags, ConfFileFlags
from toolsconf.flags.flagset import Flag, FlagSet
from toolsconf.flags.values import (
    AuthModeFlag,
    CertFlag,
    CertPathFlag,
    HostTLSPortSliceFlag,
    PasswordFlag,
    TLSProtocolsFlag,
)

__all__ = [
    "CLUSTER_SECTION",
    "ClusterFlags",
    "ConfFileFlags",
    "Flag",
    "FlagSet",
    "AuthModeFlag",
    "CertFlag",
    "CertPathFlag",
    "HostTLSPortSliceFlag",
    "PasswordFlag",
    "TLSProtocolsFlag",
]
