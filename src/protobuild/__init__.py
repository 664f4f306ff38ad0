# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build-graph synthesis for protocol buffer sources."""

__version__ = "0.1.0"
