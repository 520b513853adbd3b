"""Discovery domain exports."""

from .exceptions import ConfigurationError, DiscoveryError, InvalidState, ProfileNotFound, SessionNotFound  # noqa: F401
from .ledger import BufferedSwipeLedger, InMemorySwipeLedger, SwipeLedger  # noqa: F401
from .models import (  # noqa: F401
	MATCH_PROBABILITY,
	Decision,
	MatchEvent,
	Preferences,
	Profile,
	SessionState,
)
from .resolver import FixedSource, MatchResolver, RandomSource, UniformSource  # noqa: F401
from .selector import select_candidates  # noqa: F401
from .session import DecisionResult, DecisionSession, UndoResult  # noqa: F401
