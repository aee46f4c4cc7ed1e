"""
Signaling runtime - event store, cue lifecycle engine, dispatcher and queries.
"""
