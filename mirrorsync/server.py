"""MCP server exposing mirror syncs as tools."""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import load_configuration
from .errors import SyncError
from .git_sync import SyncOrchestrator


def _run_tool(dry_run: bool, **arguments) -> dict:
    """Build a configuration from tool arguments (credentials come from the environment) and sync."""
    logger = logging.getLogger('mirrorsync.sync')
    try:
        config = load_configuration(dry_run=dry_run, **arguments)
    except ValueError as e:
        logger.warning(f"Rejected tool call: {e}")
        return {"success": False, "error": "Configuration error", "message": str(e)}

    try:
        return SyncOrchestrator(config).run().to_dict()
    except SyncError as e:
        return {"success": False, **e.to_dict()}


def register_tools(server: FastMCP) -> None:
    """Register MCP tools with the server instance."""

    @server.tool()
    def sync_repository(
        source_repo: str,
        destination_repo: str,
        source_branch: str = "main",
        destination_branch: str = "",
        sync_all_branches: bool = False,
        sync_tags: str = "",
        force_push: bool = False
    ) -> dict:
        """
        Mirror branches and tags from a source repository into a destination repository.

        Diverged destination branches are aborted unless force_push is set. Gerrit
        destinations receive review-queue pushes (refs/for/<branch>).

        Args:
            source_repo: Source repository URL or GitHub "owner/repo" slug
            destination_repo: Destination repository URL
            source_branch: Branch to mirror (falls back to main, then master)
            destination_branch: Target branch name, defaults to source_branch
            sync_all_branches: Mirror every source branch under the same name
            sync_tags: "" to skip tags, "true" for all tags, or a regex pattern
            force_push: Allow discarding destination-only commits on diverged branches

        Returns:
            Sync report with per-branch and per-tag outcomes
        """
        return _run_tool(
            False,
            source_repo=source_repo,
            destination_repo=destination_repo,
            source_branch=source_branch,
            destination_branch=destination_branch or None,
            sync_all_branches=sync_all_branches,
            sync_tags=sync_tags,
            force_push=force_push
        )

    @server.tool()
    def plan_repository_sync(
        source_repo: str,
        destination_repo: str,
        source_branch: str = "main",
        destination_branch: str = "",
        sync_all_branches: bool = False,
        sync_tags: str = "",
        force_push: bool = False
    ) -> dict:
        """
        Report what sync_repository would do without pushing anything.

        Use this before sync_repository to check for diverged branches.

        Returns:
            Sync report whose outcomes are "planned", "up_to_date" or "aborted"
        """
        return _run_tool(
            True,
            source_repo=source_repo,
            destination_repo=destination_repo,
            source_branch=source_branch,
            destination_branch=destination_branch or None,
            sync_all_branches=sync_all_branches,
            sync_tags=sync_tags,
            force_push=force_push
        )


def initialize_server() -> FastMCP:
    server = FastMCP("mirrorsync")
    register_tools(server)
    return server


def main():
    """Run the MCP server over stdio."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )
    startup_logger = logging.getLogger('mirrorsync.startup')

    try:
        startup_logger.info("Starting mirrorsync MCP server with stdio transport")
        initialize_server().run(transport="stdio")
    except KeyboardInterrupt:
        startup_logger.info("Server stopped by user (Ctrl+C)")


if __name__ == "__main__":
    main()
