"""Command-line entry point for streamchat."""

import asyncio
import json

import click

from streamchat import __version__
from streamchat.api.dependencies import build_container
from streamchat.config import load_settings_from_env


@click.group()
@click.version_option(version=__version__, prog_name="streamchat")
def cli() -> None:
    """streamchat - streaming LLM chat with persisted history."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("streamchat.api.app:app", host=host, port=port, reload=reload)


@cli.command("list")
def list_conversations() -> None:
    """Print the conversation index as JSON, most recent first."""

    async def _list() -> list[dict]:
        container = await build_container(load_settings_from_env())
        try:
            entries = await container.index.list_conversations()
            return [meta.model_dump(by_alias=True) for meta in entries]
        finally:
            await container.close()

    click.echo(json.dumps(asyncio.run(_list()), indent=2))


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
