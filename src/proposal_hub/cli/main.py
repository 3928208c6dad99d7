"""Main CLI entry point."""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="proposal-hub", description="AI marketplace proposals and vendor responses")
    parser.add_argument("--config", type=Path, default=None, help="Settings YAML (default: $PROPOSAL_HUB_CONFIG)")
    parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    parser.add_argument(
        "--backend",
        default="local",
        choices=["local", "http"],
        help="Local SQLite store or the marketplace REST API",
    )
    parser.add_argument("--as", dest="user", default="cli-user", help="Acting user id")
    parser.add_argument(
        "--role",
        default="customer",
        choices=["customer", "vendor", "superadmin"],
        help="Role of the acting user",
    )
    parser.add_argument("--name", default=None, help="Display name of the acting user")
    parser.add_argument("--company", default=None, help="Company of the acting user")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # post
    post_parser = subparsers.add_parser("post", help="Post a new proposal")
    post_parser.add_argument("--input", type=Path, default=None, help="Proposal JSON (camelCase or snake_case)")
    post_parser.add_argument("--title", type=str, default=None)
    post_parser.add_argument("--description", type=str, default=None)
    post_parser.add_argument("--category", type=str, default=None)
    post_parser.add_argument("--industry", type=str, default=None)
    post_parser.add_argument("--priority", choices=["low", "medium", "high", "urgent"], default=None)
    post_parser.add_argument("--budget-min", type=float, default=None)
    post_parser.add_argument("--budget-max", type=float, default=None)
    post_parser.add_argument(
        "--timeline",
        choices=["immediate", "1-month", "3-months", "6-months", "1-year", "flexible"],
        default=None,
    )
    post_parser.add_argument("--required", action="append", default=[], help="Required feature (repeatable)")
    post_parser.add_argument("--preferred", action="append", default=[], help="Preferred feature (repeatable)")
    post_parser.add_argument(
        "--draft",
        action="store_true",
        help="Save as draft instead of publishing",
    )

    # list
    list_parser = subparsers.add_parser("list", help="List visible proposals")
    list_parser.add_argument("--creator-type", choices=["customer", "vendor"], default=None)
    list_parser.add_argument("--status", type=str, default=None, help="Backend status filter")
    list_parser.add_argument("--industry", type=str, default=None)
    list_parser.add_argument("--category", type=str, default=None)
    list_parser.add_argument("--mine", action="store_true", help="Only proposals created by the acting user")
    list_parser.add_argument("--query", type=str, default=None, help="Case-insensitive text search")
    list_parser.add_argument("--priority", type=str, default=None)
    list_parser.add_argument("--min-budget", type=str, default=None)
    list_parser.add_argument("--max-budget", type=str, default=None)
    list_parser.add_argument("--limit", type=int, default=None)
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument(
        "--show-explanations",
        action="store_true",
        help="Include filter explanations in output",
    )

    # show
    show_parser = subparsers.add_parser("show", help="Show one proposal with its responses")
    show_parser.add_argument("proposal_id")

    # respond
    respond_parser = subparsers.add_parser("respond", help="Submit a vendor response")
    respond_parser.add_argument("proposal_id")
    respond_parser.add_argument("--text", required=True, help="Pitch text")
    respond_parser.add_argument("--solution", type=str, default=None, help="Solution id being pitched")
    respond_parser.add_argument("--price", type=str, default=None)
    respond_parser.add_argument("--timeline", type=str, default=None)
    respond_parser.add_argument("--case-study", type=str, default=None, help="Case study URL")

    # status
    status_parser = subparsers.add_parser(
        "status",
        help="Change proposal status, or a response's status with --response",
    )
    status_parser.add_argument("proposal_id")
    status_parser.add_argument("status", help="Target status")
    status_parser.add_argument("--response", type=str, default=None, help="Response id")

    # hire / fulfill / withdraw
    hire_parser = subparsers.add_parser("hire", help="Mark a shortlisted vendor as hired")
    hire_parser.add_argument("proposal_id")
    hire_parser.add_argument("response_id")

    fulfill_parser = subparsers.add_parser("fulfill", help="Mark a proposal fulfilled")
    fulfill_parser.add_argument("proposal_id")

    withdraw_parser = subparsers.add_parser("withdraw", help="Withdraw your pending response")
    withdraw_parser.add_argument("proposal_id")
    withdraw_parser.add_argument("response_id")

    # match
    match_parser = subparsers.add_parser("match", help="Suggest vendors for a proposal")
    match_parser.add_argument("proposal_id")
    match_parser.add_argument("--limit", type=int, default=None, help="Max vendors (default from settings)")

    # solutions
    solutions_parser = subparsers.add_parser("solutions", help="Manage vendor solutions used for matching")
    solutions_parser.add_argument("action", choices=["add", "list"])
    solutions_parser.add_argument("--title", type=str, default=None)
    solutions_parser.add_argument("--description", type=str, default=None)
    solutions_parser.add_argument("--category", type=str, default=None)
    solutions_parser.add_argument("--industry", type=str, default=None)
    solutions_parser.add_argument("--vendor-id", type=str, default=None, help="Owning vendor (default: --as)")
    solutions_parser.add_argument("--vendor-company", type=str, default=None)
    solutions_parser.add_argument("--limit", type=int, default=20)

    args = parser.parse_args(argv)

    from proposal_hub.config import load_settings
    from proposal_hub.errors import ProposalHubError

    settings = load_settings(args.config)
    if args.db is not None:
        settings = settings.model_copy(update={"db_path": args.db})
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "post": _run_post,
        "list": _run_list,
        "show": _run_show,
        "respond": _run_respond,
        "status": _run_status,
        "hire": _run_hire,
        "fulfill": _run_fulfill,
        "withdraw": _run_withdraw,
        "match": _run_match,
        "solutions": _run_solutions,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return
    try:
        handler(args, _backend(args, settings), settings)
    except ProposalHubError as e:
        raise SystemExit(f"Error: {e.message}")


def _backend(args: argparse.Namespace, settings):
    from proposal_hub.backends import BackendRegistry
    from proposal_hub.models.actor import Actor

    actor = Actor(user_id=args.user, role=args.role, name=args.name, company=args.company)
    return BackendRegistry.get(args.backend, actor=actor, settings=settings)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _run_post(args: argparse.Namespace, backend, settings) -> None:
    """Run post command."""
    if args.input:
        data = json.loads(args.input.read_text())
    else:
        data = {
            "title": args.title or "",
            "description": args.description or "",
            "category": args.category or "",
            "industry": args.industry or "",
            "requirements": {
                "budget": {"min": args.budget_min, "max": args.budget_max},
                "required_features": args.required,
                "preferred_features": args.preferred,
            },
        }
        if args.priority:
            data["priority"] = args.priority
        if args.timeline:
            data["requirements"]["timeline"] = args.timeline
    data["status"] = "draft" if args.draft else data.get("status", "active")
    result = backend.create_proposal(data)
    _print_json(result.proposal.model_dump(mode="json"))


def _run_list(args: argparse.Namespace, backend, settings) -> None:
    """Run list command. Backend facets first, then the local text/budget filters."""
    from proposal_hub.errors import ValidationError
    from proposal_hub.filtering import ProposalFilterEngine, sort_newest_first
    from proposal_hub.models.contracts import FetchProposalsRequest
    from proposal_hub.models.filters import FilterState
    from proposal_hub.models.validation import parse_model

    request = parse_model(
        FetchProposalsRequest,
        {
            "creator_type": args.creator_type,
            "status": args.status,
            "industry": args.industry,
            "category": args.category,
            "created_by": backend.actor.user_id if args.mine else None,
            "limit": args.limit or settings.fetch_limit,
            "page": args.page,
        },
    )
    try:
        state = FilterState(
            query=args.query,
            priority=args.priority,
            min_budget=args.min_budget,
            max_budget=args.max_budget,
        )
    except ValueError as e:
        raise ValidationError("Invalid budget filter") from e
    proposals = sort_newest_first(backend.fetch_proposals(request).proposals)
    results = ProposalFilterEngine(state).filter_many(proposals)

    if args.show_explanations:
        output_data = [
            {
                "proposal": r.record.model_dump(mode="json"),
                "passed": r.passed,
                "excluded_by_rule": r.excluded_by_rule,
                "explanations": r.explanations,
            }
            for r in results
        ]
    else:
        output_data = [r.record.model_dump(mode="json") for r in results if r.passed]
    _print_json(output_data)


def _run_show(args: argparse.Namespace, backend, settings) -> None:
    """Run show command."""
    from proposal_hub.lifecycle import collaboration_state

    proposal = backend.fetch_proposal(args.proposal_id).proposal
    data = proposal.model_dump(mode="json")
    data["collaboration"] = {
        r.id: collaboration_state(proposal, r).model_dump() for r in proposal.responses
    }
    _print_json(data)


def _run_respond(args: argparse.Namespace, backend, settings) -> None:
    """Run respond command."""
    from proposal_hub.models.contracts import AddResponseRequest

    request = AddResponseRequest(
        proposal_id=args.proposal_id,
        proposal_text=args.text,
        solution_id=args.solution,
        proposed_price=args.price,
        proposed_timeline=args.timeline,
        case_study_link=args.case_study,
    )
    _print_json(backend.add_response(request).response.model_dump(mode="json"))


def _run_status(args: argparse.Namespace, backend, settings) -> None:
    """Run status command."""
    from proposal_hub.models.contracts import UpdateResponseStatusRequest
    from proposal_hub.models.validation import parse_model

    if args.response:
        request = parse_model(
            UpdateResponseStatusRequest,
            {"proposal_id": args.proposal_id, "response_id": args.response, "status": args.status},
        )
        _print_json(backend.update_response_status(request).response.model_dump(mode="json"))
    else:
        result = backend.update_proposal(args.proposal_id, {"status": args.status})
        _print_json(result.proposal.model_dump(mode="json"))


def _run_hire(args: argparse.Namespace, backend, settings) -> None:
    """Run hire command."""
    result = backend.mark_hired(args.proposal_id, args.response_id)
    _print_json(result.proposal.model_dump(mode="json"))


def _run_fulfill(args: argparse.Namespace, backend, settings) -> None:
    """Run fulfill command."""
    result = backend.mark_fulfilled(args.proposal_id)
    _print_json(result.proposal.model_dump(mode="json"))


def _run_withdraw(args: argparse.Namespace, backend, settings) -> None:
    """Run withdraw command."""
    _print_json(backend.withdraw_response(args.proposal_id, args.response_id).model_dump(mode="json"))


def _run_match(args: argparse.Namespace, backend, settings) -> None:
    """Run match command."""
    from proposal_hub.matching import suggest_vendors

    proposal = backend.fetch_proposal(args.proposal_id).proposal
    matches = suggest_vendors(
        proposal,
        backend,
        limit=args.limit or settings.match_limit,
        fetch_limit=settings.match_fetch_limit,
    )
    _print_json([m.model_dump(mode="json") for m in matches])


def _run_solutions(args: argparse.Namespace, backend, settings) -> None:
    """Run solutions command."""
    from proposal_hub.models.contracts import FetchSolutionsRequest
    from proposal_hub.models.solution import Solution

    if args.action == "add":
        if not args.title or not args.category or not args.industry:
            raise SystemExit("solutions add requires --title, --category and --industry")
        if not hasattr(backend, "add_solution"):
            raise SystemExit(f"solutions add is not supported by the {backend.name} backend")
        solution = Solution(
            title=args.title,
            short_description=args.description,
            category=args.category,
            industry=args.industry,
            vendor={"id": args.vendor_id or backend.actor.user_id, "company": args.vendor_company},
        )
        _print_json(backend.add_solution(solution).model_dump(mode="json"))
    elif args.action == "list":
        result = backend.fetch_solutions(
            FetchSolutionsRequest(category=args.category, industry=args.industry, limit=args.limit)
        )
        _print_json([s.model_dump(mode="json") for s in result.solutions])


if __name__ == "__main__":
    main()
