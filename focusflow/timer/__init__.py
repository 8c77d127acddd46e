"""
focusflow/timer/ - Focus timer engine.

    engine      - countdown state machine driven by wall-clock target times
    completion  - resolving the prompt shown after a focus interval ends
"""
