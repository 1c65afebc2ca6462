# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from catalogsync.app import (
    configure_integration,
    get_sync_state,
    list_runs,
    preview_normalization,
    run_all_integration_tests,
    run_integration_test,
    sync_vendor,
    vendor_overview,
)
from catalogsync.config import configure_logging
from catalogsync.domain.integration_tests import IntegrationOverrides, IntegrationTestError
from catalogsync.domain.model import ApiAuthType, IntegrationType, SyncMode, to_json

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalogsync.domain.model import VendorIntegration, VendorSyncRun, VendorSyncState

log = logging.getLogger(__name__)

EXIT_USAGE = 2
EXIT_FAILURE = 1


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile vendor catalogs")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Dry-run or apply a vendor catalog sync")
    sync.add_argument("vendor", help="Vendor slug, e.g. moscot")
    sync.add_argument(
        "--apply",
        action="store_true",
        help="Persist the changes (default: dry-run report only)",
    )
    sync.add_argument("--source", type=str, help="JSON file to read the raw batch from")
    sync.add_argument("--actor", type=str, help="Who triggered the run (defaults to config)")

    test = subparsers.add_parser("test", help="Smoke test one vendor integration")
    test.add_argument("vendor")
    test.add_argument(
        "--type",
        choices=[member.value for member in IntegrationType],
        help="Override the stored integration type for this test",
    )
    test.add_argument("--scraper-path", type=str, help="Override the scraper output path")
    test.add_argument("--api-base-url", type=str, help="Override the partner API base URL")

    subparsers.add_parser("test-all", help="Smoke test every configured integration")

    runs = subparsers.add_parser("runs", help="List sync runs, newest first")
    runs.add_argument("--vendor", type=str, help="Only runs for this vendor")
    runs.add_argument("--page", type=int, default=1)
    runs.add_argument("--page-size", type=int, default=20)

    state = subparsers.add_parser("state", help="Show sync state (all vendors if omitted)")
    state.add_argument("vendor", nargs="?")

    integration = subparsers.add_parser("integration", help="Integration settings")
    integration_sub = integration.add_subparsers(dest="integration_command", required=True)
    integration_set = integration_sub.add_parser("set", help="Create or replace an integration")
    integration_set.add_argument("vendor")
    integration_set.add_argument(
        "--type",
        required=True,
        choices=[member.value for member in IntegrationType],
    )
    integration_set.add_argument("--name", type=str)
    integration_set.add_argument("--scraper-path", type=str)
    integration_set.add_argument("--api-base-url", type=str)
    integration_set.add_argument(
        "--auth",
        choices=[member.value for member in ApiAuthType],
        default=ApiAuthType.NONE.value,
        help="API authentication scheme (default: %(default)s)",
    )
    integration_set.add_argument("--auth-header", type=str, help="Header for --auth header")
    integration_set.add_argument("--api-key", type=str)

    preview = subparsers.add_parser("preview", help="Normalize a sample without persisting")
    preview.add_argument("vendor")
    preview.add_argument("--source", type=str, help="JSON file to read the raw batch from")
    preview.add_argument("--sample", type=int, default=5)

    return parser.parse_args(list(argv))


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _run_to_dict(run: VendorSyncRun) -> dict[str, Any]:
    return {
        "id": str(run.id),
        "vendor": run.vendor,
        "mode": run.mode.value,
        "status": run.status.value,
        "actor": run.actor,
        "sourcePath": run.source_path,
        "startedAt": run.started_at.isoformat(),
        "finishedAt": run.finished_at.isoformat() if run.finished_at else None,
        "durationMs": run.duration_ms,
        "totalItems": run.total_items,
        "hash": run.hash,
        "diffSummary": run.diff_summary.to_dict() if run.diff_summary else None,
        "error": run.error,
    }


def _state_to_dict(state: VendorSyncState | None) -> dict[str, Any] | None:
    if state is None:
        return None
    return {
        "vendor": state.vendor,
        "lastRunAt": state.last_run_at.isoformat() if state.last_run_at else None,
        "lastDurationMs": state.last_duration_ms,
        "totalItems": state.total_items,
        "lastHash": state.last_hash,
        "lastSource": state.last_source,
        "lastError": state.last_error,
        "lastRunBy": state.last_run_by,
    }


def _integration_to_dict(integration: VendorIntegration) -> dict[str, Any]:
    return {
        "vendor": integration.vendor,
        "name": integration.name,
        "type": integration.type.value,
        "scraperPath": integration.scraper_path,
        "apiBaseUrl": integration.api_base_url,
        "apiAuthType": integration.api_auth_type.value,
        "lastTestAt": integration.last_test_at.isoformat() if integration.last_test_at else None,
        "lastTestOk": integration.last_test_ok,
        "lastTestError": integration.last_test_error,
    }


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "sync":
        summary = sync_vendor(
            args.vendor,
            SyncMode.APPLY if args.apply else SyncMode.DRY_RUN,
            source_path=args.source,
            actor=args.actor,
        )
        _emit(summary.to_dict())
        return 0
    if args.command == "test":
        overrides = IntegrationOverrides(
            type=IntegrationType(args.type) if args.type else None,
            scraper_path=args.scraper_path,
            api_base_url=args.api_base_url,
        )
        result = run_integration_test(args.vendor, overrides)
        _emit(
            {
                "ok": result.ok,
                "vendor": result.vendor,
                "checkedAt": result.checked_at.isoformat(),
                "meta": dict(result.meta),
            }
        )
        return 0 if result.ok else EXIT_FAILURE
    if args.command == "test-all":
        outcome = run_all_integration_tests()
        _emit(
            {
                "tested": outcome.tested,
                "passed": outcome.passed,
                "failed": outcome.failed,
                "failures": [
                    {"slug": failure.slug, "error": failure.error} for failure in outcome.failures
                ],
            }
        )
        return 0 if outcome.failed == 0 else EXIT_FAILURE
    if args.command == "runs":
        page = list_runs(args.vendor, page=args.page, page_size=args.page_size)
        _emit(
            {
                "page": page.page,
                "pageSize": page.page_size,
                "totalItems": page.total_items,
                "hasMore": page.has_more,
                "items": [_run_to_dict(run) for run in page.items],
            }
        )
        return 0
    if args.command == "state":
        if args.vendor:
            _emit(_state_to_dict(get_sync_state(args.vendor)))
        else:
            _emit(
                [
                    {
                        "integration": _integration_to_dict(entry.integration),
                        "state": _state_to_dict(entry.state),
                    }
                    for entry in vendor_overview()
                ]
            )
        return 0
    if args.command == "integration" and args.integration_command == "set":
        integration = configure_integration(
            args.vendor,
            type=IntegrationType(args.type),
            name=args.name,
            scraper_path=args.scraper_path,
            api_base_url=args.api_base_url,
            api_auth_type=ApiAuthType(args.auth),
            api_auth_header=args.auth_header,
            api_key=args.api_key,
        )
        _emit(_integration_to_dict(integration))
        return 0
    if args.command == "preview":
        preview = preview_normalization(args.vendor, source_path=args.source, sample=args.sample)
        _emit(
            {
                "vendor": preview.vendor,
                "source": preview.source,
                "products": [to_json(product) for product in preview.products],
                "rejections": [
                    {"index": r.index, "catalogId": r.catalog_id, "message": r.message}
                    for r in preview.rejections
                ],
            }
        )
        return 0
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        code = _dispatch(parsed_args)
    except (ValueError, IntegrationTestError):
        log.exception("Invalid request")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILURE)
    if code:
        sys.exit(code)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    run()
