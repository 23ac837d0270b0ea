"""
RepoLens Package Main Entry Point

Allows running RepoLens as a module: python -m repolens
"""

from repolens.utils.logging_config import setup_logging


def main():
    """Main entry point for running the RepoLens server."""
    import uvicorn

    setup_logging()
    print("🚀 Starting RepoLens Server via package...")
    uvicorn.run("repolens.web.server:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
