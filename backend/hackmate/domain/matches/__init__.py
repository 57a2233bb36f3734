"""Match registry exports."""

from .models import Match
from .service import MatchService, exists, get_or_create, list_matches

__all__ = [
	"Match",
	"MatchService",
	"exists",
	"get_or_create",
	"list_matches",
]
