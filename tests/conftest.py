"""Test-runner configuration: avoid flaky input-generation timing checks on cold starts."""

from hypothesis import HealthCheck, settings

settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
