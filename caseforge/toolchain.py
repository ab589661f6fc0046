"""Decisions about compiler features that depend on the toolchain in use."""

from __future__ import annotations

import re

_FEATURES_FLAG = "-Zallow-features="
_FLAG_SEPARATOR = "\x1f"
_DIAGNOSTIC_FEATURE = "proc_macro_diagnostic"
_DIAGNOSTIC_CFG = "use_proc_macro_diagnostic"
_UNSTABLE_CHANNELS = {"nightly", "dev"}
_LAST_BUGGY_VERSION = "1.50.0"

_VERSION_RE = re.compile(r"^\s*(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+\S*)?\s*$")


def allow_features(encoded_rustflags):
    """List the features allowed by ``-Zallow-features`` flags.

    Returns None when no encoded flags are given at all.
    """
    if encoded_rustflags is None:
        return None
    features = []
    for arg in encoded_rustflags.split(_FLAG_SEPARATOR):
        if arg.startswith(_FEATURES_FLAG):
            features.extend(arg.split("=")[1].split(","))
    return features


def can_enable_proc_macro_diagnostic(encoded_rustflags) -> bool:
    """Whether the diagnostic feature is allowed by the given flags."""
    features = allow_features(encoded_rustflags)
    if features is None:
        return True
    return _DIAGNOSTIC_FEATURE in features


def diagnostic_cfg(channel: str, encoded_rustflags):
    """Return the cfg name to enable for ``channel``, or None."""
    if channel.lower() in _UNSTABLE_CHANNELS and can_enable_proc_macro_diagnostic(
        encoded_rustflags
    ):
        return _DIAGNOSTIC_CFG
    return None


def _version_key(version: str):
    match = _VERSION_RE.match(version)
    if match is None:
        raise ValueError(f"invalid version: {version!r}")
    major, minor, patch, pre = match.groups()
    release_rank = 0 if pre else 1
    return int(major), int(minor), int(patch), release_rank, pre or ""


def needs_should_panic_sanitize(version: str) -> bool:
    """Whether this compiler duplicates ``should_panic`` attributes."""
    key = _version_key(version)
    if key[0] < 1:
        raise ValueError(f"unsupported compiler version: {version}")
    return key <= _version_key(_LAST_BUGGY_VERSION)