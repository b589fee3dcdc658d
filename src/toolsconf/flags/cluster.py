"""
Ready-made flag bundles shared by the database tools.

ClusterFlags holds the connection flags (--host, --port, --user, TLS ...)
that are bound under the "cluster" config section. ConfFileFlags holds
--config-file and --instance, which pick the config file and the deployment
instance before the other flags are resolved.
"""

from __future__ import annotations

from toolsconf.client.config import ClusterConfig
from toolsconf.client.endpoints import DEFAULT_PORT
from toolsconf.config.settings import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_NAME
from toolsconf.flags.flagset import BoolValue, FlagSet, IntValue, StringValue, UsageFormatter
from toolsconf.flags.values import (
    AuthModeFlag,
    CertFlag,
    CertPathFlag,
    HostTLSPortSliceFlag,
    PasswordFlag,
    TLSProtocolsFlag,
)

CLUSTER_SECTION = "cluster"


def _plain(usage: str) -> str:
    return usage


class ClusterFlags:
    """Storage for the cluster connection flags."""

    def __init__(self):
        self.seeds = HostTLSPortSliceFlag()
        self.default_port = IntValue(DEFAULT_PORT)
        self.user = StringValue()
        self.password = PasswordFlag()
        self.auth_mode = AuthModeFlag()
        self.tls_enable = BoolValue()
        self.tls_name = StringValue()
        self.tls_protocols = TLSProtocolsFlag()
        self.tls_root_ca_file = CertFlag()
        self.tls_root_ca_path = CertPathFlag()
        self.tls_cert_file = CertFlag()
        self.tls_key_file = CertFlag()
        self.tls_key_file_pass = PasswordFlag()

    def new_flag_set(self, fmt_usage: UsageFormatter = _plain) -> FlagSet:
        """Register the cluster flags; values land on this object."""
        f = FlagSet("cluster")
        f.var(self.seeds, "host", fmt_usage("The database host."), shorthand="h")
        f.var(self.default_port, "port", fmt_usage("The default database port."), shorthand="p")
        f.var(
            self.user,
            "user",
            fmt_usage("The database user to use to connect to the cluster."),
            shorthand="U",
        )
        f.var(
            self.password,
            "password",
            fmt_usage("The database password to use to connect to the cluster."),
            shorthand="P",
        )
        f.var(
            self.auth_mode,
            "auth",
            fmt_usage(
                "The authentication mode used by the server. INTERNAL uses standard"
                " user/pass. EXTERNAL uses external methods (like LDAP) which are"
                " configured on the server. EXTERNAL requires TLS. PKI allows TLS"
                " authentication and authorization based on a certificate. No user"
                " name needs to be configured."
            ),
        )
        f.var(
            self.tls_enable,
            "tls-enable",
            fmt_usage("Enable TLS. If false, other tls options are ignored."),
            no_opt_value="true",
        )
        f.var(
            self.tls_name,
            "tls-name",
            fmt_usage("The server TLS context to use to authenticate the connection."),
        )
        f.var(
            self.tls_protocols,
            "tls-protocols",
            fmt_usage(
                "Set the TLS protocol selection criteria. This format is the same as"
                " Apache's SSLProtocol."
            ),
        )
        f.var(self.tls_root_ca_file, "tls-cafile", fmt_usage("The CA used when connecting."))
        f.var(self.tls_root_ca_path, "tls-capath", fmt_usage("A path containing CAs for connecting."))
        f.var(
            self.tls_cert_file,
            "tls-certfile",
            fmt_usage("The certificate file for mutual TLS authentication."),
        )
        f.var(
            self.tls_key_file,
            "tls-keyfile",
            fmt_usage("The key file used for mutual TLS authentication."),
        )
        f.var(
            self.tls_key_file_pass,
            "tls-keyfile-password",
            fmt_usage("The password used to decrypt the key-file if encrypted."),
        )
        return f

    def new_cluster_config(self) -> ClusterConfig:
        """
        Assemble the connection settings.

        TLS material is only carried over when --tls-enable is set. Seeds
        without a port get --port, seeds without a TLS name get --tls-name.
        """
        conf = ClusterConfig(
            seeds=self.seeds.seeds,
            user=self.user.value,
            password=str(self.password),
            auth_mode=self.auth_mode.value,
        )

        if self.tls_enable.value:
            conf.cert = bytes(self.tls_cert_file)
            conf.key = bytes(self.tls_key_file)
            conf.key_pass = bytes(self.tls_key_file_pass)
            conf.tls_min_version = self.tls_protocols.min
            conf.tls_max_version = self.tls_protocols.max

            conf.root_ca = []
            if self.tls_root_ca_file.value:
                conf.root_ca.append(self.tls_root_ca_file.value)
            conf.root_ca.extend(self.tls_root_ca_path.value)

        for seed in conf.seeds:
            if seed.port == 0:
                seed.port = self.default_port.value
            if not seed.tls_name and self.tls_name.value:
                seed.tls_name = self.tls_name.value

        return conf


class ConfFileFlags:
    """Storage for --config-file and --instance."""

    def __init__(self):
        self.file = StringValue()
        self.instance = StringValue()

    def new_flag_set(self, fmt_usage: UsageFormatter = _plain) -> FlagSet:
        f = FlagSet("config")
        f.var(
            self.file,
            "config-file",
            fmt_usage(f"Config file (default is {DEFAULT_CONFIG_DIR}/{DEFAULT_CONFIG_NAME})"),
        )
        f.var(
            self.instance,
            "instance",
            fmt_usage(
                "Sections with the instance suffix are read. e.g. when instance 'a'"
                " is specified sections 'cluster_a', 'uda_a' are read."
            ),
        )
        return f


__all__ = ["CLUSTER_SECTION", "ClusterFlags", "ConfFileFlags"]
