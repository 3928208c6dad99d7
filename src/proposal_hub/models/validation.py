"""Structural validation for proposals and responses."""

from typing import Any, Optional, Type, TypeVar

import pydantic

from proposal_hub.errors import ValidationError
from proposal_hub.models.proposal import ProposalDraft
from proposal_hub.models.response import ResponseDraft
from proposal_hub.models.vocabulary import Vocabulary

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
PROPOSAL_TEXT_MAX_LENGTH = 5000

M = TypeVar("M", bound=pydantic.BaseModel)


def _normalize_feature(feature: str) -> str:
    return feature.strip().lower()


def proposal_problems(proposal: ProposalDraft, vocabulary: Optional[Vocabulary] = None) -> list[str]:
    """Return every structural problem with a proposal; empty list when valid."""
    vocab = vocabulary or Vocabulary()
    problems: list[str] = []

    title = proposal.title.strip()
    if not title:
        problems.append("Title is required")
    elif len(title) > TITLE_MAX_LENGTH:
        problems.append(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")

    description = proposal.description.strip()
    if not description:
        problems.append("Description is required")
    elif len(description) > DESCRIPTION_MAX_LENGTH:
        problems.append(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")

    if not proposal.category:
        problems.append("Category is required")
    elif proposal.category not in vocab.categories:
        problems.append(f"Unknown category: {proposal.category}")

    if not proposal.industry:
        problems.append("Industry is required")
    elif proposal.industry not in vocab.industries:
        problems.append(f"Unknown industry: {proposal.industry}")

    req = proposal.requirements
    budget = req.budget
    if (budget.min is not None and budget.min < 0) or (budget.max is not None and budget.max < 0):
        problems.append("Budget must not be negative")
    if budget.min is not None and budget.max is not None and budget.min > budget.max:
        problems.append("Maximum budget must be greater than minimum budget")

    required = {_normalize_feature(f) for f in req.required_features if f.strip()}
    preferred = {_normalize_feature(f) for f in req.preferred_features if f.strip()}
    overlap = sorted(required & preferred)
    if overlap:
        problems.append(f"Features cannot be both required and preferred: {', '.join(overlap)}")

    if req.data_type is not None and req.data_type not in vocab.data_types:
        problems.append(f"Unknown data type: {req.data_type}")
    for tag in req.compliance:
        if tag not in vocab.compliance_options:
            problems.append(f"Unknown compliance requirement: {tag}")

    return problems


def validate_proposal(proposal: ProposalDraft, vocabulary: Optional[Vocabulary] = None) -> None:
    """Raise ValidationError listing all problems, if any."""
    problems = proposal_problems(proposal, vocabulary)
    if problems:
        raise ValidationError("; ".join(problems), problems)


def validate_response_draft(draft: ResponseDraft) -> None:
    problems: list[str] = []
    text = draft.proposal_text.strip()
    if not text:
        problems.append("Proposal text is required")
    elif len(text) > PROPOSAL_TEXT_MAX_LENGTH:
        problems.append(f"Proposal text cannot exceed {PROPOSAL_TEXT_MAX_LENGTH} characters")
    if problems:
        raise ValidationError("; ".join(problems), problems)


def parse_model(model_cls: Type[M], data: dict[str, Any]) -> M:
    """model_validate that reports failures as ValidationError."""
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in e.errors()
        ]
        raise ValidationError("; ".join(problems), problems) from e


def parse_proposal(data: dict[str, Any], vocabulary: Optional[Vocabulary] = None) -> ProposalDraft:
    """Parse wizard/API input (camelCase or snake_case) and validate it."""
    draft = parse_model(ProposalDraft, data)
    validate_proposal(draft, vocabulary)
    return draft


def derive_tags(title: str, industry: str, data_type: Optional[str] = None) -> list[str]:
    """Search tags: industry, data type and the first three title words, lowercased."""
    tags = [industry.lower(), (data_type or "").lower(), *title.lower().split()[:3]]
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
