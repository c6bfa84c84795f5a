"""Biometric sensor adapters."""

from simpleauth.adapter.biometric.gateway import MockBiometricGateway

__all__ = ["MockBiometricGateway"]
