"""Application layer: the state machine and the controllers built on it."""

from simpleauth.application.biometric_controller import BiometricController
from simpleauth.application.state_machine import AuthStateMachine, StateListener

__all__ = [
    "AuthStateMachine",
    "BiometricController",
    "StateListener",
]
