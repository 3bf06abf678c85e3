# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Redis Stream Name Constants.

Centralized definitions for the stream keys and cleanup policies used across
the producer, the tailing worker and the CLI.
"""

# =============================================================================
# STREAMS
# =============================================================================

# Action event stream
#
# Producers (write to this stream):
#   - StreamProducer.append / StreamProducer.simulate
#   - `actionstream append` / `actionstream simulate`
#
# Consumers (read from this stream):
#   - StreamTailWorker: logs every entry, then removes the batch
#
# Only one StreamTailWorker may tail a given key. There is no locking around
# the post-batch delete.
STREAMING_ACTIONS_STREAM = "Streaming_Actions"

# Start of stream. The tail cursor never moves past it because processed
# entries are removed instead of skipped.
STREAM_START_ID = "0"

# =============================================================================
# CLEANUP POLICIES
# =============================================================================

# Delete the whole key after each batch. Entries appended between the length
# snapshot and the delete are lost.
CLEANUP_STREAM = "stream"

# XDEL exactly the ids that were read. Entries appended after the snapshot
# survive until the next cycle.
CLEANUP_ENTRIES = "entries"

CLEANUP_POLICIES = (CLEANUP_STREAM, CLEANUP_ENTRIES)
