#!/usr/bin/env -S uv run --quiet --script
# /// script
# dependencies = [
#   "pyyaml",
#   "click>=8.0",
# ]
# ///
"""
helm-packager - Package Helm charts as part of a build pipeline.
Resolves chart versions, runs `helm package` and publishes a placeholder artifact.
"""

from helm_packager import cli

if __name__ == "__main__":
    cli()
