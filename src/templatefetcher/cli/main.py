#!/usr/bin/env python3
"""Entry point for the templatefetch CLI."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent
from typing import Any

from templatefetcher import __version__
from templatefetcher.adapters.channel_logger import ChannelLogger, configure_logging
from templatefetcher.adapters.console_dialogs import ConsoleDialogs
from templatefetcher.adapters.transports import TransportRegistry
from templatefetcher.adapters.yaml_template_store import YamlTemplateStore
from templatefetcher.app.cache import CacheManager
from templatefetcher.app.fetch import FetchService
from templatefetcher.app.templates import TemplateCatalogue
from templatefetcher.domain.errors import TemplateFetcherError
from templatefetcher.domain.template import Template
from templatefetcher.ports.dialogs import SelectTemplateOptions
from templatefetcher.settings import SETTINGS
from templatefetcher.utils.telemetry import clear as telemetry_clear
from templatefetcher.utils.telemetry import iter_events as telemetry_iter
from templatefetcher.utils.telemetry import record_event, summarize as telemetry_summarize

HELP_OVERVIEW = dedent(
    """
    Quick start:
      - Register a template:  templatefetch add web ~/templates/web --depth 1
      - Fetch it here:        templatefetch fetch web
      - Fetch interactively:  templatefetch fetch

    URIs may be local paths, file://, http(s):// or ftp:// locations.
    Fetching into a non-empty directory overwrites files with the same name
    and never removes anything; failed fetches are not rolled back.
    """
)


@dataclass
class Services:
    logger: ChannelLogger
    store: YamlTemplateStore
    dialogs: ConsoleDialogs
    caches: CacheManager
    catalogue: TemplateCatalogue
    fetcher: FetchService


def _build_services(prefix: str = "") -> Services:
    logger = ChannelLogger(prefix)
    store = YamlTemplateStore(SETTINGS.settings_file)
    dialogs = ConsoleDialogs(store)
    caches = CacheManager(store, logger)
    catalogue = TemplateCatalogue(store, caches, logger)
    fetcher = FetchService(
        logger,
        dialogs=dialogs,
        transports=TransportRegistry(timeout=SETTINGS.http_timeout),
    )
    return Services(
        logger=logger,
        store=store,
        dialogs=dialogs,
        caches=caches,
        catalogue=catalogue,
        fetcher=fetcher,
    )


def _template_payload(template: Template) -> dict[str, Any]:
    return {"name": template.name, **template.to_config(), "transport": template.uri.transport.value}


def _fail(command: str, exc: Exception) -> int:
    print(f"{command} error: {exc}", file=sys.stderr)
    record_event(SETTINGS, command, {"error": type(exc).__name__}, level="error", status="failed")
    return 1


def _pick_template(services: Services, name: str | None, place_holder: str, **options: Any) -> Template | None:
    if name:
        return services.catalogue.get(name)
    return services.dialogs.select_template(SelectTemplateOptions(place_holder=place_holder, **options))


def _fetch_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Fetcher]")
    logger = services.logger
    if args.target:
        target = Path(args.target).expanduser().resolve()
    else:
        target = Path.cwd()
        logger.warning(f"No target directory is specified, going to use '{target}' instead")

    try:
        selection = services.catalogue.list()
        if not selection.valid_templates:
            for error in selection.invalid_template_errors:
                print(error, file=sys.stderr)
            if selection.invalid_template_errors:
                print("There are no valid templates", file=sys.stderr)
            else:
                print("There are no templates defined (see `templatefetch new`)", file=sys.stderr)
            return 1
        template = _pick_template(services, args.name, "Select a template to fetch")
        if template is None:
            print("Template fetching cancelled", file=sys.stderr)
            return 1
        confirm = not (args.yes or args.depth is not None)
        if args.depth is not None:
            template = template.with_discard_depth(args.depth)
        logger.flush()
        started = time.perf_counter()
        report = services.fetcher.fetch(template, target, confirm_depth=confirm)
    except TemplateFetcherError as exc:
        return _fail("fetch", exc)

    duration_ms = (time.perf_counter() - started) * 1000
    payload = {
        "template": report.template,
        "kind": report.kind.value,
        "transport": template.uri.transport.value,
        "destination": str(report.destination),
        "discardedLeadingDirectories": report.discarded_leading_directories,
        "files": report.files,
    }
    record_event(SETTINGS, "fetch", payload, status="ok", duration_ms=duration_ms)
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(f"Fetched {report.template} ({report.kind.value}) -> {report.destination} ({report.files} files)")
    return 0


def _kind_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Resolver]")
    try:
        template = services.catalogue.get(args.name)
        kind = services.fetcher.resolve_kind(template)
    except TemplateFetcherError as exc:
        return _fail("kind", exc)
    print(kind.value)
    return 0


def _list_cmd(args: argparse.Namespace) -> int:
    services = _build_services()
    try:
        selection = services.catalogue.list()
    except TemplateFetcherError as exc:
        return _fail("list", exc)
    payload = [_template_payload(template) for template in selection.valid_templates.values()]
    if args.json:
        print(json.dumps({"templates": payload, "errors": selection.invalid_template_errors}, ensure_ascii=False, indent=2))
        return 0
    for error in selection.invalid_template_errors:
        print(error, file=sys.stderr)
    if not payload:
        print("No templates defined")
        return 0
    for item in payload:
        flags = []
        if item["isArchive"]:
            flags.append("archive")
        if item["discardedLeadingDirectories"]:
            flags.append(f"depth={item['discardedLeadingDirectories']}")
        if item["cacheName"]:
            flags.append(f"cache={item['cacheName']}")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(f"{item['name']}\t{item['uri']}{suffix}")
    return 0


def _new_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Creation]")
    try:
        template = services.dialogs.new_template()
        if template is None:
            print("The template creation has been cancelled", file=sys.stderr)
            return 1
        services.catalogue.add(template)
    except TemplateFetcherError as exc:
        return _fail("new", exc)
    record_event(SETTINGS, "new", {"transport": template.uri.transport.value}, status="ok")
    print(f"The '{template.name}' template has been successfully added !")
    return 0


def _add_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Creation]")
    try:
        template = Template.create(
            args.name,
            args.uri,
            is_archive=args.archive,
            discarded_leading_directories=args.depth,
        )
        services.catalogue.add(template)
    except TemplateFetcherError as exc:
        return _fail("add", exc)
    record_event(SETTINGS, "add", {"transport": template.uri.transport.value}, status="ok")
    print(f"The '{template.name}' template has been successfully added !")
    return 0


def _delete_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Deletion]")
    try:
        template = _pick_template(services, args.name, "Select a template to delete (can not be undone)")
        if template is None:
            print("Template deletion cancelled", file=sys.stderr)
            return 1
        services.catalogue.delete(template)
    except TemplateFetcherError as exc:
        return _fail("delete", exc)
    record_event(SETTINGS, "delete", {}, status="ok")
    print(f"The {template.name} template has been successfully deleted")
    return 0


def _cache_cmd(args: argparse.Namespace) -> int:
    services = _build_services("[Cache]")
    command = args.cache_command
    try:
        if command == "dir":
            raw = Path(args.path) if args.path else services.dialogs.ask_cache_path()
            if raw is None:
                return _show_cache_root(services)
            root = services.caches.set_cache_root(raw)
            print(f"The cache directory has been updated: {root}")
            return 0
        if command == "new":
            template = _pick_template(
                services,
                args.name,
                "Select a template to create a cache for",
                filter=lambda candidate: candidate.cache_name is None,
            )
            if template is None:
                return 1
            updated = services.caches.new_cache(template)
            print(f"'{updated.name}' template cache has been created at {services.caches.cache_path(updated)}")
            record_event(SETTINGS, "cache.new", {}, status="ok")
            return 0
        if command == "delete":
            template = _pick_template(
                services,
                args.name,
                "Select a template to delete the cache of",
                filter=lambda candidate: candidate.cache_name is not None,
            )
            if template is None:
                return 1
            services.caches.delete_cache(template)
            print(f"'{template.name}' template cache has been deleted")
            record_event(SETTINGS, "cache.delete", {}, status="ok")
            return 0
    except TemplateFetcherError as exc:
        return _fail(f"cache.{command}", exc)
    print("Unsupported cache command", file=sys.stderr)
    return 2


def _show_cache_root(services: Services) -> int:
    try:
        root = services.caches.cache_root()
    except TemplateFetcherError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(str(root))
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        events = telemetry_iter(SETTINGS, args.event)
        print(json.dumps(telemetry_summarize(events), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        if telemetry_clear(SETTINGS):
            print("Telemetry log cleared")
        else:
            print("Telemetry log is already empty")
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def _non_negative(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{raw}' is not an integer") from exc
    if value < 0:
        raise argparse.ArgumentTypeError("The directory depth can not have a negative value")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templatefetch",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"templatefetch {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Show debug output")

    sub = parser.add_subparsers(dest="command", required=True)

    fetch_cmd = sub.add_parser("fetch", help="Fetch a template into a directory")
    fetch_cmd.add_argument("name", nargs="?", help="Template name (default: ask)")
    fetch_cmd.add_argument("--target", help="Target directory (default: current directory)")
    fetch_cmd.add_argument("--depth", type=_non_negative, help="Leading directories to discard for this run")
    fetch_cmd.add_argument("--yes", action="store_true", help="Do not confirm the discard depth")
    fetch_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON result")
    fetch_cmd.set_defaults(func=_fetch_cmd)

    kind_cmd = sub.add_parser("kind", help="Print whether a template is a file, directory or archive")
    kind_cmd.add_argument("name", help="Template name")
    kind_cmd.set_defaults(func=_kind_cmd)

    list_cmd = sub.add_parser("list", help="List stored templates")
    list_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    list_cmd.set_defaults(func=_list_cmd)

    new_cmd = sub.add_parser("new", help="Create a template interactively")
    new_cmd.set_defaults(func=_new_cmd)

    add_cmd = sub.add_parser("add", help="Create a template from arguments")
    add_cmd.add_argument("name", help="Template name")
    add_cmd.add_argument("uri", help="Local path or file://, http(s)://, ftp:// URI")
    add_cmd.add_argument("--archive", action="store_true", help="Extract the fetched file")
    add_cmd.add_argument("--depth", type=_non_negative, default=0, help="Leading directories to discard (default: 0)")
    add_cmd.set_defaults(func=_add_cmd)

    delete_cmd = sub.add_parser("delete", help="Delete a template and its cache")
    delete_cmd.add_argument("name", nargs="?", help="Template name (default: ask)")
    delete_cmd.set_defaults(func=_delete_cmd)

    cache_cmd = sub.add_parser("cache", help="Template cache utilities")
    cache_sub = cache_cmd.add_subparsers(dest="cache_command", required=True)

    cache_dir = cache_sub.add_parser("dir", help="Show or set the cache directory")
    cache_dir.add_argument("path", nargs="?", help="New cache directory")
    cache_dir.set_defaults(func=_cache_cmd)

    cache_new = cache_sub.add_parser("new", help="Create a cache folder for a template")
    cache_new.add_argument("name", nargs="?", help="Template name (default: ask)")
    cache_new.set_defaults(func=_cache_cmd)

    cache_delete = cache_sub.add_parser("delete", help="Delete the cache folder of a template")
    cache_delete.add_argument("name", nargs="?", help="Template name (default: ask)")
    cache_delete.set_defaults(func=_cache_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.add_argument("--event", help="Only summarise events with this name (e.g. fetch)")
    telemetry_report.set_defaults(func=_telemetry_cmd)
    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose=args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
