"""Biometric sensor gateway interface."""

from simpleauth.domain.value import BiometryKind


class BiometricGateway:
    """Platform biometric sensor.

    Sensor matching happens on the platform; this interface only asks
    whether a sensor is usable and runs the prompt.
    """

    def is_available(self) -> bool:
        """Whether a sensor is present, enrolled and usable."""
        raise NotImplementedError

    def kind(self) -> BiometryKind:
        """Kind of sensor; its value is the label shown to users."""
        raise NotImplementedError

    async def prompt(self, reason: str) -> None:
        """Show the biometric prompt.

        Args:
            reason: Text explaining why the prompt is shown

        Raises:
            BiometricPromptError: If the user was not verified
        """
        raise NotImplementedError
