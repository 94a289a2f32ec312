"""Interface every service directory backend implements."""

from typing import List, Protocol, runtime_checkable

from ..routing.errors import DirectoryError
from ..routing.models import CandidateBackend

__all__ = ['DirectoryError', 'ServiceDirectory']


@runtime_checkable
class ServiceDirectory(Protocol):
    """Answers "which instances run this service?"."""

    async def query(self, service_name: str, port_type: str = '',
                    timeout: float = 5.0) -> List[CandidateBackend]:
        """Return the instances of a service, optionally filtered by port type.

        An empty list means the service has no instances. Any lookup or I/O
        failure raises DirectoryError.
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the backend."""
        ...
