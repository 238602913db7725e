"""
Example demonstrating an instrumented service client with structured logging.

This example shows how to:
- Subclass InstrumentedHTTPClient for one downstream service
- Resolve the base address from the environment (or a .env file)
- Log every call as JSON lines with headers, payloads and status codes
- Enrich log records with the headers of the request being served

Set ENDPOINTS__JSONPLACEHOLDER in your environment or .env file, e.g.:
    ENDPOINTS__JSONPLACEHOLDER=https://jsonplaceholder.typicode.com
"""

import asyncio
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from serviceclient import EnvConfiguration
from serviceclient import HttpClientError
from serviceclient import InstrumentedHTTPClient
from serviceclient import LoggingSettings
from serviceclient import RequestContext
from serviceclient import StructuredLogger
from serviceclient import configure_logging
from serviceclient import request_scope
from serviceclient.http.query import QUERY_NAME

load_dotenv()

console = Console()


@dataclass
class Post:
    id: int
    user_id: int
    title: str
    body: str


@dataclass
class NewPost:
    user_id: int
    title: str
    body: str


@dataclass
class PostQuery:
    user_id: int = field(metadata={QUERY_NAME: "userId"})


class PostServiceClient(InstrumentedHTTPClient):
    """Client for the posts API."""

    def __init__(self, configuration: EnvConfiguration, logger: StructuredLogger):
        super().__init__(configuration, logger, "Endpoints:JsonPlaceholder")
        self.add_default_header("X-Client", "serviceclient-example")

    async def list_posts(self, user_id: int) -> list[Post]:
        return await self.get("/posts", list[Post], query=PostQuery(user_id=user_id))

    async def create_post(self, post: NewPost) -> Post:
        return await self.post("/posts", post, Post)

    async def get_post(self, post_id: int) -> Post:
        return await self.get(f"/posts/{post_id}", Post)


async def main() -> None:
    """Main example demonstrating instrumented calls."""
    console.print(Panel.fit("[bold blue]serviceclient Example with Structured Logging[/bold blue]"))

    log_file = Path("logs") / "calls.jsonl"
    settings = LoggingSettings.from_env()
    settings.json_log_file = log_file
    configure_logging(settings)

    structured = StructuredLogger(settings=settings)
    client = PostServiceClient(EnvConfiguration(), structured)

    # Pretend we are serving an inbound request; its headers enrich every record.
    inbound = RequestContext(method="GET", url="/dashboard", headers={"X-Correlation-Id": "example-123"})

    try:
        with request_scope(inbound):
            posts = await client.list_posts(user_id=1)
            console.print(f"[green]Fetched {len(posts)} posts for user 1[/green]")

            created = await client.create_post(NewPost(user_id=1, title="Hello", body="First post"))
            created_text = Text()
            created_text.append("Created: ", style="bold green")
            created_text.append(f"#{created.id} ", style="cyan")
            created_text.append(created.title, style="white")
            console.print(created_text)

            try:
                await client.get_post(100000)
            except HttpClientError as e:
                error_text = Text()
                error_text.append("ERROR: ", style="bold red")
                error_text.append(str(e), style="red")
                error_text.append(f" (code: {e.code})", style="dim red")
                console.print(error_text)
    finally:
        await client.close()

    console.print(f"\n[dim]Calls logged to: {log_file.absolute()}[/dim]")
    console.print("\n[dim]Example complete.[/dim]")


if __name__ == "__main__":
    asyncio.run(main())
