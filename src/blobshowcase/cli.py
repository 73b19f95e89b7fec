"""CLI entrypoint for blobshowcase."""

import argparse
import json
from pathlib import Path

from blobshowcase.config.loader import load_config, load_config_or_defaults, resolve_rpc_url
from blobshowcase.projects.aggregator import SearchMode, format_address, showcase_link
from blobshowcase.runners.run_showcase import main as run_showcase_main
from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)


def _config_from_args(args: argparse.Namespace) -> dict:
    if args.config:
        return load_config(Path(args.config))
    return load_config_or_defaults()


def cmd_list(args: argparse.Namespace) -> None:
    """Fetch projects and print one page of them."""
    config = _config_from_args(args)
    source, view = run_showcase_main(
        term=args.search,
        mode=args.mode,
        page=args.page,
        page_size=args.page_size,
        config=config,
    )

    if view is None:
        print(f"Error: {source.error}")
        raise SystemExit(1)

    if args.format == "json":
        print(view.model_dump_json(indent=2, by_alias=True))
        return

    if not view.projects:
        print("No projects with showcase URL found")
        return

    base_url = config["showcase_base_url"]
    print(f"{view.total_count} projects (page {view.page}/{view.total_pages})")
    print(f"{'Name':<30} {'Owner':<16} {'URL':<60}")
    print("-" * 108)
    for project in view.projects:
        print(
            f"{project.display_name:<30} {format_address(project.owner):<16} "
            f"{showcase_link(project, base_url) or '':<60}"
        )


def cmd_config(args: argparse.Namespace) -> None:
    """Print the resolved configuration."""
    config = _config_from_args(args)
    print(json.dumps({**config, "resolved_rpc_url": resolve_rpc_url(config)}, indent=2))


def main(argv=None) -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="blobshowcase",
        description="Browse showcase projects stored on Sui Blob objects",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to config YAML (default: blobshowcase.config.yaml if present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="Fetch and list showcase projects")
    list_parser.add_argument("--search", type=str, default="", help="Search term (default: none)")
    list_parser.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in SearchMode],
        default=SearchMode.ALL.value,
        help="Search field: all, name or owner (default: all)",
    )
    list_parser.add_argument("--page", type=int, default=1, help="1-based page number (default: 1)")
    list_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Projects per page (default: projects_per_page from config)",
    )
    list_parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    list_parser.set_defaults(func=cmd_list)

    config_parser = subparsers.add_parser("config", help="Show resolved configuration")
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except SystemExit:
        raise
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
