"""Local storage for proposals and solutions."""

from proposal_hub.store.proposal_store import ProposalStore
from proposal_hub.store.solution_store import SolutionStore

__all__ = ["ProposalStore", "SolutionStore"]
