"""Configuration constants for module-bom."""

# Version
__version__ = "0.1.0"

# Analysis tool
TOOL_ID = "cyclonedx-node-module"
"""Dependency id of the analysis tool in buildpack.toml"""

TOOL_EXECUTABLE = "cyclonedx-bom"
"""Executable shipped by the analysis tool"""

DEFAULT_VERSION = "*"
"""Version constraint used when resolving the analysis tool"""

LAYER_NAME = TOOL_ID
"""Name of the cache layer holding the provisioned tool"""

# Tool invocation
REPORT_FILENAME = "bom.json"
"""Report written by the tool into the working directory"""

TOOL_ARGS = ["-o", REPORT_FILENAME]
"""Fixed arguments passed to the tool"""

# Buildpack layout
BUILDPACK_TOML = "buildpack.toml"
"""Catalog of dependencies shipped with the buildpack"""

OFFLINE_DEPENDENCIES_DIR = "dependencies"
"""Directory (under the buildpack root) holding vendored dependency archives"""

# Layer metadata keys
DEPENDENCY_SHA_KEY = "dependency-sha"
"""Checksum of the dependency currently installed in a layer"""

BUILT_AT_KEY = "built_at"
"""Timestamp of the last time the layer was provisioned"""

# Environment variables set by the lifecycle
CNB_BUILDPACK_DIR_ENV = "CNB_BUILDPACK_DIR"
CNB_STACK_ID_ENV = "CNB_STACK_ID"

# Processing settings
DOWNLOAD_TIMEOUT_SECONDS = 300
"""Timeout for downloading a dependency archive (5 minutes)"""
