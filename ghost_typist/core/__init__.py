"""Core gameplay primitives (matcher, scoring reducer, and timers).

Kept free of FastAPI concerns so it can be driven by the session, the API, and tests.
"""
