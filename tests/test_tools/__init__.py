"""
Test Tools Package
Tests for the tools module (timing classifier, notifications, identity, names)
"""

__all__ = [
    "test_timing_classifier",
    "test_notification_service",
    "test_identity_provider",
    "test_name_resolver",
]
