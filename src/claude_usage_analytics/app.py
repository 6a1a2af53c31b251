"""Command-line entry point: runs one analytics query and prints the result."""

import logging
import sys

import orjson
from PySide6.QtCore import QCoreApplication, QCommandLineOption, QCommandLineParser

from claude_usage_analytics.services.analytics_service import AnalyticsService
from claude_usage_analytics.services.config_manager import ConfigManager
from claude_usage_analytics.services.jsonl_parser import parse_timestamp
from claude_usage_analytics.types.sessions import SessionFilters

logger = logging.getLogger(__name__)

COMMANDS = ("sessions", "session", "delete", "dashboard", "analytics",
            "optimize", "projects", "groups", "export")
ID_COMMANDS = ("session", "delete", "export")


def _build_parser() -> tuple[QCommandLineParser, dict[str, QCommandLineOption]]:
    parser = QCommandLineParser()
    parser.setApplicationDescription(
        "Usage, cost and optimization analytics for Claude Code session logs."
    )
    parser.addHelpOption()
    parser.addPositionalArgument("command", "One of: " + ", ".join(COMMANDS))
    parser.addPositionalArgument("id", "Session id (session, delete, export)", "[id]")

    options = {
        "root": QCommandLineOption(["r", "root"], "Projects root directory.", "dir"),
        "project": QCommandLineOption(["p", "project"], "Project name or directory.", "name"),
        "search": QCommandLineOption(["s", "search"], "Search title, first message, project.", "text"),
        "from": QCommandLineOption(["from"], "Start date lower bound (ISO).", "date"),
        "to": QCommandLineOption(["to"], "Start date upper bound (ISO).", "date"),
        "page": QCommandLineOption(["page"], "Page number, 1-based.", "n"),
        "limit": QCommandLineOption(["limit"], "Page size.", "n"),
        "format": QCommandLineOption(
            ["f", "format"], "Export format: json, markdown, csv; anything else exports as JSON.",
            "fmt", "json",
        ),
        "debug": QCommandLineOption(["debug"], "Enable debug logging."),
    }
    for option in options.values():
        parser.addOption(option)
    return parser, options


def _print_json(data) -> None:
    sys.stdout.write(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode() + "\n")


def _int_option(parser: QCommandLineParser, option: QCommandLineOption) -> int | None:
    if not parser.isSet(option):
        return None
    return int(parser.value(option))


def _date_option(parser: QCommandLineParser, option: QCommandLineOption):
    if not parser.isSet(option):
        return None
    parsed = parse_timestamp(parser.value(option))
    if parsed is None:
        raise ValueError(f"Invalid date: {parser.value(option)!r}")
    return parsed


def _dispatch(service: AnalyticsService, command: str, session_id: str,
              parser: QCommandLineParser, options: dict) -> int:
    if command == "sessions":
        filters = SessionFilters(
            project=parser.value(options["project"]),
            search=parser.value(options["search"]),
            start_date=_date_option(parser, options["from"]),
            end_date=_date_option(parser, options["to"]),
        )
        page = service.list_sessions(
            filters,
            page=_int_option(parser, options["page"]),
            limit=_int_option(parser, options["limit"]),
        )
        _print_json(page.to_dict())
    elif command == "groups":
        filters = SessionFilters(project=parser.value(options["project"]),
                                 search=parser.value(options["search"]))
        _print_json([g.to_dict() for g in service.list_project_groups(filters)])
    elif command == "session":
        detail = service.get_session(session_id)
        if detail is None:
            print(f"Session not found: {session_id}", file=sys.stderr)
            return 1
        _print_json(detail.to_dict())
    elif command == "delete":
        if not service.delete_session(session_id):
            print(f"Session not found or not deleted: {session_id}", file=sys.stderr)
            return 1
        _print_json({"deleted": session_id})
    elif command == "export":
        result = service.export_session(session_id, parser.value(options["format"]))
        if result is None:
            print(f"Session not found: {session_id}", file=sys.stderr)
            return 1
        sys.stdout.write(result.content + "\n")
    elif command == "dashboard":
        _print_json(service.get_dashboard_summary().to_dict())
    elif command == "analytics":
        analytics = service.get_analytics(
            _date_option(parser, options["from"]),
            _date_option(parser, options["to"]),
        )
        _print_json(analytics.to_dict())
    elif command == "optimize":
        _print_json(service.get_optimization_report().to_dict())
    elif command == "projects":
        _print_json(service.list_project_names())
    return 0


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run one command, return the process exit code."""
    args = list(argv) if argv is not None else sys.argv
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(args)
    app.setApplicationName("Claude Usage Analytics")
    app.setOrganizationName("claude-usage-analytics")

    parser, options = _build_parser()
    if not parser.parse(args):
        print(parser.errorText(), file=sys.stderr)
        return 2
    if parser.isSet("help"):
        print(parser.helpText())
        return 0

    config = ConfigManager()
    debug = parser.isSet(options["debug"]) or config.get_bool("advanced/debugLogging")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    positional = parser.positionalArguments()
    command = positional[0] if positional else ""
    if command not in COMMANDS:
        print(parser.helpText(), file=sys.stderr)
        return 2
    session_id = positional[1] if len(positional) > 1 else ""
    if command in ID_COMMANDS and not session_id:
        print(f"'{command}' needs a session id", file=sys.stderr)
        return 2

    root = parser.value(options["root"]) if parser.isSet(options["root"]) else None
    service = AnalyticsService(projects_root=root, config=config)
    try:
        return _dispatch(service, command, session_id, parser, options)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    finally:
        service.cleanup()
