"""
LP Sketch - Central Version Management
======================================

All version information is maintained here.
Import: from config.version import VERSION, VERSION_STRING, APP_NAME, SCHEMA_VERSION
"""

# Main version number (Semantic Versioning: MAJOR.MINOR.PATCH)
VERSION_MAJOR = 0
VERSION_MINOR = 4
VERSION_PATCH = 0

# Release type: "alpha", "beta", "rc1", "" (empty for stable release)
VERSION_SUFFIX = "beta"

# Build date (optional, can be set by CI/CD)
BUILD_DATE = "2026-10"

# App name
APP_NAME = "LP Sketch Kernel"

# Document schema version written by Document.to_dict()
SCHEMA_VERSION = "1.8.0"

# Derived strings
VERSION = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
VERSION_STRING = f"{VERSION}-{VERSION_SUFFIX}" if VERSION_SUFFIX else VERSION
VERSION_FULL = f"v{VERSION_STRING}"


def get_version_info() -> dict:
    """
    Returns all version information as a dictionary.
    Useful for debug output and bug reports.
    """
    return {
        "app_name": APP_NAME,
        "version": VERSION,
        "version_string": VERSION_STRING,
        "version_full": VERSION_FULL,
        "major": VERSION_MAJOR,
        "minor": VERSION_MINOR,
        "patch": VERSION_PATCH,
        "suffix": VERSION_SUFFIX,
        "build_date": BUILD_DATE,
        "schema_version": SCHEMA_VERSION,
    }
