from abc import ABC, abstractmethod


class ThirdParty(ABC):
    """An external tool structmapper shells out to."""

    @staticmethod
    @abstractmethod
    def check_requirements() -> list[str]:
        """Names of the missing executables, empty when the tool is usable."""
