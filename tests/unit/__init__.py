"""Unit tests for individual components in isolation.

Coverage:
    - session/: Message log, intent rules, response merging, controller
    - agent/: Agent configuration and service construction
    - ui/: HTTP model backend against mock transports
"""
