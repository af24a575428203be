"""
pytest configuration and fixtures for the device tree tests.

Provides:
- Hypothesis profiles (select with HYPOTHESIS_PROFILE)
- Sample device tree blobs
"""

import os

import pytest
from hypothesis import settings, Verbosity, Phase

from builders import SAMPLE_TREE, encode_tree

# Default profile: balanced speed and coverage
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
)

# CI profile: more thorough testing
settings.register_profile(
    "ci",
    max_examples=500,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)

# Dev profile: fast iteration
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

# Debug profile: verbose output
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def sample_blob():
    """Encoded SAMPLE_TREE."""
    return encode_tree(SAMPLE_TREE)


@pytest.fixture
def sample_file(tmp_path, sample_blob):
    """SAMPLE_TREE written to a file."""
    path = tmp_path / "devicetree.bin"
    path.write_bytes(sample_blob)
    return path
