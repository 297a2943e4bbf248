"""Command-line entry point for the talent matching service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from talentmatch.alerts import (
    AlertDispatcher,
    AlertError,
    AlertService,
    DispatchResult,
)
from talentmatch.config.environment import EnvironmentConfig
from talentmatch.config.exceptions import ConfigurationError
from talentmatch.config.loader import load_config
from talentmatch.config.models import AppConfig
from talentmatch.dataset import DatasetError, load_dataset, read_dataset
from talentmatch.domain.models import Alert
from talentmatch.logging import get_logger
from talentmatch.logging.config import configure_logging
from talentmatch.matching import MatchingService, NotFoundError, ScoreEngine
from talentmatch.persistence import OfferRepository, RecordNotFoundError, get_session
from talentmatch.persistence.database import close_database, init_database
from talentmatch.scheduler import SchedulerService
from talentmatch.utils.timestamps import utc_now

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="talentmatch",
        description="Talent Match - talent/offer scoring and alert notifications",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    score = commands.add_parser("score", help="Score one published offer for a talent")
    score.add_argument("talent_id", type=int)
    score.add_argument("offer_ref", help="Offer id, uid or slug")

    rank = commands.add_parser("rank", help="Rank all published offers for a talent")
    rank.add_argument("talent_id", type=int)
    rank.add_argument("--min-score", type=int, default=0)

    publish = commands.add_parser(
        "publish", help="Publish an offer and notify matching instant alerts"
    )
    publish.add_argument("offer_id", type=int)

    digest = commands.add_parser("digest", help="Run the daily or weekly alert digest once")
    digest.add_argument("frequency", choices=["daily", "weekly"])

    preview = commands.add_parser(
        "preview", help="Count published offers matching an unsaved alert"
    )
    preview.add_argument("payload", help="Alert payload as JSON")

    alert_create = commands.add_parser("alert-create", help="Create an alert for a talent")
    alert_create.add_argument("talent_id", type=int)
    alert_create.add_argument("payload", help="Alert payload as JSON")

    alert_update = commands.add_parser("alert-update", help="Partially update an alert")
    alert_update.add_argument("talent_id", type=int)
    alert_update.add_argument("alert_id", type=int)
    alert_update.add_argument("payload", help="Fields to change as JSON")

    alert_deactivate = commands.add_parser("alert-deactivate", help="Deactivate an alert")
    alert_deactivate.add_argument("talent_id", type=int)
    alert_deactivate.add_argument("alert_id", type=int)

    alert_list = commands.add_parser("alert-list", help="List a talent's alerts")
    alert_list.add_argument("talent_id", type=int)

    load_data = commands.add_parser(
        "load-data", help="Load talents, offers, calendars and applications from YAML"
    )
    load_data.add_argument("path", type=Path)

    commands.add_parser("serve", help="Run the digest scheduler until interrupted")

    return parser


def _parse_payload(raw: str) -> Dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AlertError(f"Payload is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise AlertError("Payload must be a JSON object")
    return payload


def _alert_to_dict(alert: Alert) -> Dict[str, Any]:
    return alert.model_dump(mode="json")


def _dispatch_to_dict(result: DispatchResult) -> Dict[str, Any]:
    return {
        "frequency": result.frequency.value,
        "offerId": result.offer_id,
        "windowStart": result.window_start.isoformat() if result.window_start else None,
        "windowEnd": result.window_end.isoformat() if result.window_end else None,
        "offersConsidered": result.offers_considered,
        "alertsEvaluated": result.alerts_evaluated,
        "alertsMatched": result.alerts_matched,
        "notificationsSent": result.notifications_sent,
        "duplicates": result.duplicates,
        "skippedNoRecipient": result.skipped_no_recipient,
        "failures": result.failures,
        "skipped": result.skipped,
    }


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def publish_offer(offer_id: int, dispatcher: AlertDispatcher) -> DispatchResult:
    """Mark an offer as published, then run the instant alert path for it."""
    with get_session() as session:
        repo = OfferRepository(session)
        offer = repo.get(offer_id)
        if offer is None:
            raise RecordNotFoundError(f"Offer not found: {offer_id}")
        if not offer.is_published:
            repo.publish(offer_id, utc_now())
            logger.info(
                "Offer published",
                extra={"event": "offer.published", "offer_id": offer_id},
            )

    return dispatcher.dispatch_instant(offer_id)


def run_command(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Execute a one-shot subcommand and print its JSON result."""
    if args.command == "score":
        service = MatchingService(engine=ScoreEngine(app_config.scoring))
        _emit(service.score_offer(args.talent_id, args.offer_ref).to_dict())

    elif args.command == "rank":
        service = MatchingService(engine=ScoreEngine(app_config.scoring))
        ranking = service.rank_offers(args.talent_id, min_score=args.min_score)
        _emit(
            {
                "offers": [
                    {"offerId": e.offer_id, "uid": e.offer_uid, "title": e.title, **e.result.to_dict()}
                    for e in ranking.entries
                ],
                "stats": {
                    "total": ranking.stats.total,
                    "excellent": ranking.stats.excellent,
                    "good": ranking.stats.good,
                    "alreadyApplied": ranking.stats.already_applied,
                },
            }
        )

    elif args.command == "publish":
        result = publish_offer(args.offer_id, AlertDispatcher(app_config.alerts))
        _emit(_dispatch_to_dict(result))
        return 1 if result.had_failures else 0

    elif args.command == "digest":
        result = AlertDispatcher(app_config.alerts).dispatch_periodic(args.frequency)
        _emit(_dispatch_to_dict(result))
        return 1 if result.had_failures else 0

    elif args.command == "preview":
        count = AlertService(app_config.alerts).preview_alert(_parse_payload(args.payload))
        _emit({"count": count})

    elif args.command == "alert-create":
        alert = AlertService(app_config.alerts).create_alert(
            args.talent_id, _parse_payload(args.payload)
        )
        _emit(_alert_to_dict(alert))

    elif args.command == "alert-update":
        alert = AlertService(app_config.alerts).update_alert(
            args.talent_id, args.alert_id, _parse_payload(args.payload)
        )
        _emit(_alert_to_dict(alert))

    elif args.command == "alert-deactivate":
        alert = AlertService(app_config.alerts).deactivate_alert(args.talent_id, args.alert_id)
        _emit(_alert_to_dict(alert))

    elif args.command == "alert-list":
        listing = AlertService(app_config.alerts).list_alerts(args.talent_id)
        _emit(
            {
                "alerts": [_alert_to_dict(alert) for alert in listing.alerts],
                "stats": {
                    "total": listing.stats.total,
                    "active": listing.stats.active,
                    "notificationsSent": listing.stats.notifications_sent,
                },
            }
        )

    elif args.command == "load-data":
        summary = load_dataset(read_dataset(args.path))
        _emit(summary.__dict__)

    return 0


def serve(app_config: AppConfig, start_time: float) -> int:
    """Run the digest scheduler until SIGINT/SIGTERM."""
    shutdown_event = threading.Event()
    dispatcher = AlertDispatcher(app_config.alerts)
    scheduler_service = SchedulerService(
        digest_callable=dispatcher.dispatch_periodic,
        alerts_config=app_config.alerts,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)

    logger.info(
        "Talent Match stopped",
        extra={
            "event": "service.stopping",
            "uptime_seconds": round(time.time() - start_time, 2),
        },
    )
    return 0


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        # One-shot commands print JSON on stdout, so their logs go to stderr
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
            stream=sys.stdout if args.command == "serve" else sys.stderr,
        )

        logger.info(
            "Talent Match starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "custom_weights": not app_config.scoring.is_default(),
            },
        )

        init_database(env_config.database_url)

        try:
            if args.command == "serve":
                return serve(app_config, start_time)
            return run_command(args, app_config)
        finally:
            close_database()

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except (NotFoundError, RecordNotFoundError) as e:
        print(f"Not found: {e}", file=sys.stderr)
        return 2
    except (AlertError, DatasetError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
