"""
Config file loading, scoping and flag binding.
"""

from toolsconf.config.loader import (
    BytesGetter,
    FileGetter,
    Loader,
    TomlUnmarshaller,
    YamlUnmarshaller,
    find_config_file,
    new_tools_loader,
)
from toolsconf.config.resolver import ConfigResolver, FlagBinding, get_config_resolver
from toolsconf.config.secrets import SecretFormat, parse_reference, resolve_secret
from toolsconf.config.settings import Settings, get_settings
from toolsconf.config.tools import (
    Config,
    ToolsConfig,
    filter_instance,
    filter_sections,
    resolve_scope,
)

__all__ = [
    # Loader
    "Loader",
    "FileGetter",
    "BytesGetter",
    "TomlUnmarshaller",
    "YamlUnmarshaller",
    "new_tools_loader",
    "find_config_file",
    # Scoped config
    "Config",
    "ToolsConfig",
    "filter_instance",
    "filter_sections",
    "resolve_scope",
    # Flag binding
    "ConfigResolver",
    "FlagBinding",
    "get_config_resolver",
    # Secrets
    "SecretFormat",
    "parse_reference",
    "resolve_secret",
    # Settings
    "Settings",
    "get_settings",
]
