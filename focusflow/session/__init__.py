"""
focusflow/session/ - Mirrors timer sessions to a remote log.

    tracker  - turns timer events into remote session writes
    worker   - detached background queue with a single delayed retry
    remote   - HTTP (PostgREST) and null session-log clients
"""
