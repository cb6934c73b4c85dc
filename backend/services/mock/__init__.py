from services.mock.insurance_policy import mock_policy_completion

__all__ = [
    "mock_policy_completion",
]
