"""
RepoLens Command Line Interface

Provides command-line access to RepoLens functionality.
"""

import argparse
import sys
import json
from pathlib import Path
from typing import Optional

from repolens.analysis.analysis_service import AnalysisService
from repolens.analysis.errors import InvalidRepositoryReference
from repolens.core.settings import AnalysisSettings
from repolens.utils.logging_config import setup_logging


def render_result(repo_info, format: str) -> str:
    """Render an analysis result in the requested output format."""
    if format == "tree":
        return repo_info.tree_structure
    if format == "mermaid":
        return repo_info.directory_graph + "\n"
    return json.dumps(repo_info.to_response(), indent=2, ensure_ascii=False) + "\n"


def analyze_repo(
    url: str,
    output: Optional[str] = None,
    format: str = "json",
    local: bool = False,
    sort: Optional[str] = None,
) -> int:
    """Analyze a repository and output results. Returns the process exit code."""
    print(f"🔍 Analyzing repository: {url}", file=sys.stderr)

    settings = AnalysisSettings.from_env()
    if sort:
        settings = settings.model_copy(update={"order": sort})

    try:
        service = AnalysisService(settings)
        if local:
            repo_info = service.analyze_local(url)
        else:
            repo_info = service.analyze_repository(url)
    except InvalidRepositoryReference as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"❌ Analysis failed: {e}", file=sys.stderr)
        return 1

    rendered = render_result(repo_info, format)
    if output:
        output_path = Path(output)
        output_path.write_text(rendered, encoding="utf-8")
        print(f"✅ Results saved to: {output_path}", file=sys.stderr)
    else:
        sys.stdout.write(rendered)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="RepoLens - README, dependency and structure overview of a GitHub repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  repolens analyze https://github.com/user/repo
  repolens analyze user/repo --output results.json
  repolens analyze user/repo --format tree
  repolens analyze ./checkout --local --format mermaid --sort name
  repolens server --port 8080
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a repository")
    analyze_parser.add_argument("url", help="GitHub repository URL or owner/repo")
    analyze_parser.add_argument("--output", "-o", help="Output file path")
    analyze_parser.add_argument(
        "--format",
        choices=["json", "tree", "mermaid"],
        default="json",
        help="Output format",
    )
    analyze_parser.add_argument(
        "--local", action="store_true", help="Treat URL as an existing local directory"
    )
    analyze_parser.add_argument(
        "--sort",
        choices=["listing", "name"],
        help="Sibling order (default: directory listing order)",
    )

    server_parser = subparsers.add_parser("server", help="Start the RepoLens server")
    server_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    server_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    server_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging(stream=sys.stderr)

    if args.command == "analyze":
        sys.exit(
            analyze_repo(
                url=args.url,
                output=args.output,
                format=args.format,
                local=args.local,
                sort=args.sort,
            )
        )
    elif args.command == "server":
        start_server(host=args.host, port=args.port, reload=args.reload)


def start_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Start the RepoLens server."""
    import uvicorn

    print(f"🚀 Starting RepoLens server on {host}:{port}")
    uvicorn.run("repolens.web.server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
