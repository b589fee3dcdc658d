"""
Resolve command.
"""

from __future__ import annotations

import json
from typing import Any

from toolsconf.cli.ux import console, header, print_key_value, warning
from toolsconf.client.config import ClientPolicy, ClusterConfig
from toolsconf.config.resolver import ConfigResolver
from toolsconf.flags.cluster import CLUSTER_SECTION, ClusterFlags, ConfFileFlags
from toolsconf.flags.flagset import FlagSet

MASK = "********"


def _mask(secret: str, reveal: bool) -> str:
    if not secret or reveal:
        return secret
    return MASK


def summarize(
    conf: ClusterConfig,
    policy: ClientPolicy,
    tls_enable: bool,
    config_file: str | None,
    reveal_secrets: bool = False,
) -> dict[str, Any]:
    """Plain data view of the resolved connection settings."""
    tls: dict[str, Any] | None = None
    if tls_enable:
        tls = {
            "min_version": conf.tls_min_version.label,
            "max_version": conf.tls_max_version.label,
            "root_cas": 0,
            "system_roots": False,
            "client_certificate": None,
        }
        if policy.tls is not None:
            tls["root_cas"] = len(policy.tls.trust_pool)
            tls["system_roots"] = policy.tls.trust_pool.system_defaults
            if policy.tls.identity is not None:
                tls["client_certificate"] = policy.tls.identity.certificate.subject.rfc4514_string()

    return {
        "config_file": config_file,
        "seeds": [str(seed) for seed in conf.new_hosts()],
        "user": conf.user,
        "password": _mask(conf.password, reveal_secrets),
        "auth_mode": conf.auth_mode.value,
        "tls": tls,
    }


def resolve_command(
    resolver: ConfigResolver,
    cluster: ClusterFlags,
    conf_file: ConfFileFlags,
    cluster_flag_set: FlagSet,
    output_format: str = "text",
    reveal_secrets: bool = False,
) -> int:
    """
    Resolve the cluster connection settings from flags and the config file.

    Args:
        resolver: Binding table used to apply the config file
        cluster: Parsed cluster flags
        conf_file: Parsed --config-file/--instance flags
        cluster_flag_set: Flag set holding the cluster flags
        output_format: "text" or "json"
        reveal_secrets: Print passwords instead of masking them

    Returns:
        Exit code (0 = resolved)
    """
    resolver.bind_flags(cluster_flag_set, CLUSTER_SECTION)
    config_file = resolver.init_config(
        conf_file.file.value, conf_file.instance.value, cluster_flag_set
    )

    conf = cluster.new_cluster_config()
    policy = conf.new_client_policy()
    summary = summarize(conf, policy, cluster.tls_enable.value, config_file, reveal_secrets)

    if output_format == "json":
        print(json.dumps(summary, indent=2))
        return 0

    header("Resolved Cluster Configuration")
    if config_file is None:
        warning("No config file found, using command line flags and defaults")

    print_key_value(
        {
            "Config file": config_file or "-",
            "Instance": conf_file.instance.value or "-",
            "Seeds": ", ".join(summary["seeds"]),
            "User": summary["user"] or "-",
            "Password": summary["password"] or "-",
            "Auth mode": summary["auth_mode"],
        }
    )

    tls = summary["tls"]
    if tls is None:
        print_key_value({"TLS": "disabled"})
    else:
        print_key_value(
            {
                "Protocols": f"{tls['min_version']} - {tls['max_version']}",
                "Appended CAs": str(tls["root_cas"]),
                "System roots": "yes" if tls["system_roots"] else "no",
                "Client certificate": tls["client_certificate"] or "-",
            },
            title="TLS",
        )
    console.print()
    return 0
