from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from routekeeper.app import (
    add_association,
    add_template_alias,
    apply_reconciliation,
    build_store,
    preview_reconciliation,
    remove_association,
    remove_template_alias,
    run_auto_actions,
    show_template,
    verify_associations,
    verify_provider_models,
)
from routekeeper.config import configure_logging
from routekeeper.domain.errors import NotFoundError, ValidationError
from routekeeper.domain.reconciliation import AutoTrigger
from routekeeper.domain.verification import CancellationToken

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from routekeeper.app import VerificationReport
    from routekeeper.domain.model import ModelTemplate
    from routekeeper.domain.reconciliation import (
        ApplyResult,
        AutoActionResult,
        ReconciliationPreview,
    )

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile and verify gateway associations")
    parser.add_argument(
        "--backend",
        choices=("gateway", "sqlite"),
        default="gateway",
        help="Talk to the gateway admin API or open its database directly",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("preview", help="Show associations that would be added or removed")
    subparsers.add_parser("associate", help="Create every missing association")
    subparsers.add_parser("clean", help="Remove associations whose target no longer exists")
    subparsers.add_parser("reconcile", help="Apply both additions and removals")

    verify = subparsers.add_parser("verify", help="Run test calls against associations")
    verify.add_argument(
        "--concurrency",
        type=int,
        help="Maximum number of test calls in flight (defaults to config)",
    )
    verify.add_argument("--model-id", type=int, help="Only verify associations of this model")
    verify.add_argument(
        "--provider-id",
        type=int,
        help="Verify this provider's catalog entries instead of stored associations",
    )
    verify.add_argument(
        "--disable-failed",
        action="store_true",
        help="Disable associations whose test call failed",
    )

    link = subparsers.add_parser("link", help="Create one association by hand")
    link.add_argument("--model-id", type=int, required=True)
    link.add_argument("--provider-id", type=int, required=True)
    link.add_argument("--provider-model", type=str, required=True)
    link.add_argument("--weight", type=int, help="Routing weight (defaults to config)")
    link.add_argument("--priority", type=int, help="Routing priority (defaults to config)")

    unlink = subparsers.add_parser("unlink", help="Delete one association by id")
    unlink.add_argument("association_id", type=int)

    auto = subparsers.add_parser(
        "auto", help="Run the enabled follow-ups after a provider or catalog change"
    )
    auto.add_argument("event", choices=[trigger.value for trigger in AutoTrigger])
    auto.add_argument(
        "--models-added", action="store_true", help="The catalog change added models"
    )
    auto.add_argument(
        "--models-removed", action="store_true", help="The catalog change removed models"
    )

    template = subparsers.add_parser("template", help="Inspect or edit model templates")
    template_sub = template.add_subparsers(dest="template_command", required=True)
    template_show = template_sub.add_parser("show", help="List a model's aliases")
    template_show.add_argument("model_id", type=int)
    template_add = template_sub.add_parser("add", help="Add a manual alias")
    template_add.add_argument("model_id", type=int)
    template_add.add_argument("alias", type=str)
    template_remove = template_sub.add_parser("remove", help="Remove a manual alias")
    template_remove.add_argument("model_id", type=int)
    template_remove.add_argument("alias", type=str)

    args = parser.parse_args(list(argv))
    if args.command == "verify":
        if args.concurrency is not None and args.concurrency < 1:
            raise ValueError("--concurrency must be >= 1")
        if args.provider_id is not None and (args.model_id is not None or args.disable_failed):
            raise ValueError("--provider-id excludes --model-id and --disable-failed")
    return args


def _log_preview(preview: ReconciliationPreview) -> None:
    for addition in preview.additions:
        log.info(
            f"+ {addition.model_name} <- {addition.provider_name}:{addition.provider_model}"
        )
    for removal in preview.removals:
        association = removal.association
        log.info(
            f"- {removal.model_name} <- {removal.provider_name}:{association.provider_model} "
            f"(#{association.id}, {removal.reason})"
        )
    log.info(f"Preview: additions={preview.add_count}, removals={preview.remove_count}")


def _log_apply(result: ApplyResult) -> None:
    for failure in result.failures:
        log.warning(f"Failed: {failure.item}: {failure.message}")
    log.info(
        f"Applied: added={result.added}, removed={result.removed}, "
        f"stale={result.stale_skipped}, failed={result.failed}"
    )


def _log_auto_actions(result: AutoActionResult) -> None:
    if result.associated is not None:
        _log_apply(result.associated)
    if result.cleaned is not None:
        _log_apply(result.cleaned)


def _log_template(template: ModelTemplate) -> None:
    log.info(f"Template for {template.model_name} (#{template.model_id}):")
    for item in template.items:
        sources = ", ".join(sorted(item.provenance))
        log.info(f"  {item.alias} [{sources}]")


def _log_report(report: VerificationReport) -> None:
    for job_id, error in report.errors.items():
        log.warning(f"{job_id}: {error}")
    progress = report.progress
    log.info(
        f"Verified: total={progress.total}, succeeded={progress.succeeded}, "
        f"failed={progress.failed}, cancelled={progress.cancelled}"
    )
    if report.disabled is not None:
        log.info(f"Disabled {report.disabled.affected} association(s)")


def _cancel_on_sigint(token: CancellationToken) -> Callable[[int, FrameType | None], None]:
    def handler(_signal_received: int, _frame: FrameType | None) -> None:
        if token.cancelled:
            sigint_handler(_signal_received, _frame)
        log.info("Cancelling verification; press Ctrl+C again to quit")
        token.cancel()

    return handler


def _dispatch(args: argparse.Namespace) -> None:
    store = build_store(args.backend)
    if args.command == "preview":
        _log_preview(preview_reconciliation(store=store))
    elif args.command in {"associate", "clean"}:
        _log_apply(apply_reconciliation(args.command, store=store))
    elif args.command == "reconcile":
        _log_apply(apply_reconciliation("all", store=store))
    elif args.command == "verify":
        token = CancellationToken()
        previous = signal(SIGINT, _cancel_on_sigint(token))
        try:
            if args.provider_id is not None:
                report = verify_provider_models(
                    args.provider_id, store=store, concurrency=args.concurrency, token=token
                )
            else:
                report = verify_associations(
                    model_id=args.model_id,
                    store=store,
                    concurrency=args.concurrency,
                    disable_failed=args.disable_failed,
                    token=token,
                )
        finally:
            signal(SIGINT, previous)
        _log_report(report)
    elif args.command == "link":
        association = add_association(
            args.model_id,
            args.provider_id,
            args.provider_model,
            weight=args.weight,
            priority=args.priority,
            store=store,
        )
        log.info(f"Created association {association.id}")
    elif args.command == "unlink":
        remove_association(args.association_id, store=store)
    elif args.command == "auto":
        _log_auto_actions(
            run_auto_actions(
                AutoTrigger(args.event),
                models_added=args.models_added,
                models_removed=args.models_removed,
                store=store,
            )
        )
    elif args.command == "template":
        if args.template_command == "show":
            template = show_template(args.model_id, store=store)
        elif args.template_command == "add":
            template = add_template_alias(args.model_id, args.alias, store=store)
        else:
            template = remove_template_alias(args.model_id, args.alias, store=store)
        _log_template(template)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _dispatch(parsed_args)
    except (ValidationError, NotFoundError) as exc:
        log.error(str(exc))  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
