"""Domain service base."""


class Service:
    """Base for domain services.

    A service composes collaborators behind domain interfaces. It may share
    the credential slot, but the authentication state itself belongs to the
    state machine.
    """
