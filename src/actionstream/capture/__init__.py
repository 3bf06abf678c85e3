# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Capture layer: writes action events into the stream.
"""

from .producer import StreamProducer

__all__ = ["StreamProducer"]
