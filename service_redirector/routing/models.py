"""Request-scoped data model of the redirect decision engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .address import ServiceAddress

SCHEME_TAGS = ('http', 'https')


@dataclass(frozen=True)
class CandidateBackend:
    """One service instance returned by the directory."""

    hostname: str
    tags: Tuple[str, ...]
    port: int

    def __post_init__(self):
        if not (1 <= self.port <= 65535):
            raise ValueError(f"candidate {self.hostname} has invalid port {self.port}")
        object.__setattr__(self, 'tags', tuple(self.tags))

    def guess_scheme(self) -> str:
        """First http/https tag (case-insensitive) wins; http otherwise."""
        for tag in self.tags:
            if tag.lower() in SCHEME_TAGS:
                return tag.lower()
        return 'http'

    @property
    def sort_key(self) -> Tuple[str, int]:
        return self.hostname, self.port


@dataclass(frozen=True)
class CandidateLink:
    """A candidate together with the hostname and URL shown to the user."""

    candidate: CandidateBackend
    display_hostname: str
    url: str

    @property
    def port(self) -> int:
        return self.candidate.port

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.candidate.tags


class DecisionType(str, Enum):
    """Types of redirect decisions."""
    LIVENESS = "liveness"                # health/metrics short-circuit
    SINGLE_REDIRECT = "single_redirect"  # custom route or exactly one candidate
    CANDIDATE_LIST = "candidate_list"    # two or more candidates
    NO_MATCH = "no_match"                # unparseable hostname or no candidates
    UPSTREAM_ERROR = "upstream_error"    # directory or template failure


class NoMatchReason(str, Enum):
    NOT_A_SERVICE_ADDRESS = "not a service address"
    NO_INSTANCES = "no instances"


STATUS_CODES = {
    DecisionType.LIVENESS: 200,
    DecisionType.SINGLE_REDIRECT: 307,
    DecisionType.CANDIDATE_LIST: 200,
    DecisionType.NO_MATCH: 404,
    DecisionType.UPSTREAM_ERROR: 500,
}


@dataclass(frozen=True)
class RedirectDecision:
    """Result of evaluating one request."""
    type: DecisionType
    hostname: str = ''
    url: Optional[str] = None
    candidates: Tuple[CandidateLink, ...] = ()
    reason: Optional[NoMatchReason] = None
    detail: Optional[str] = None
    address: Optional[ServiceAddress] = None
    body: str = ''

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.type]

    @classmethod
    def liveness(cls, body: str = '') -> 'RedirectDecision':
        return cls(type=DecisionType.LIVENESS, body=body)

    @classmethod
    def single_redirect(cls, url: str, hostname: str = '',
                        address: Optional[ServiceAddress] = None) -> 'RedirectDecision':
        return cls(type=DecisionType.SINGLE_REDIRECT, url=url, hostname=hostname, address=address)

    @classmethod
    def candidate_list(cls, candidates: Sequence[CandidateLink], hostname: str,
                       address: ServiceAddress) -> 'RedirectDecision':
        return cls(
            type=DecisionType.CANDIDATE_LIST,
            candidates=tuple(candidates),
            hostname=hostname,
            address=address
        )

    @classmethod
    def no_match(cls, reason: NoMatchReason, hostname: str,
                 address: Optional[ServiceAddress] = None) -> 'RedirectDecision':
        return cls(type=DecisionType.NO_MATCH, reason=reason, hostname=hostname, address=address)

    @classmethod
    def upstream_error(cls, detail: str, hostname: str = '',
                       address: Optional[ServiceAddress] = None) -> 'RedirectDecision':
        return cls(type=DecisionType.UPSTREAM_ERROR, detail=detail, hostname=hostname, address=address)
