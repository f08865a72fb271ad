"""Command-line interface for the paper finder."""

import asyncio
import json
from typing import Annotated, Optional

import typer

from .config.factory import create_agent, create_llm_provider, create_term_generator
from .config.loader import DEFAULT_CONFIG_PATH, ProfileConfig, load_config, load_profiles
from .paper_sources.models import Paper

app = typer.Typer(
    name="paper-finder",
    help="Find research papers across academic databases.",
    add_completion=False,
)

ProfileOption = Annotated[
    Optional[str],
    typer.Option("--profile", "-p", help="Configuration profile (default: $PAPER_FINDER_PROFILE)"),
]
SourceOption = Annotated[
    Optional[list[str]],
    typer.Option("--source", "-s", help="Override providers (can specify multiple)"),
]
FormatOption = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: text or json"),
]


def _load_profile(profile: str | None, sources: list[str] | None = None) -> ProfileConfig:
    """Load a profile, applying CLI overrides; exits on configuration errors."""
    try:
        config = load_config(profile)
        if sources:
            config = config.model_copy(
                update={
                    "paper_sources": config.paper_sources.model_validate(
                        {**config.paper_sources.model_dump(), "providers": sources}
                    )
                }
            )
    except (KeyError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    return config


def _check_query(query: str) -> None:
    if not query.strip():
        typer.echo("Error: Query must not be empty", err=True)
        raise typer.Exit(1)


def _check_format(output_format: str) -> None:
    if output_format not in ("text", "json"):
        typer.echo("Error: Format must be one of: text, json", err=True)
        raise typer.Exit(1)


def _echo_papers(papers: list[Paper]) -> None:
    if not papers:
        typer.echo("No papers found.")
        return

    typer.echo(f"Found {len(papers)} papers:\n")
    for i, p in enumerate(papers, 1):
        typer.echo(f"{i}. [{p.source}] {p.title}")
        typer.echo(f"   Date: {p.published_date} | Citations: {p.citations} | Score: {p.relevance_score:.2f}")
        authors = ", ".join(p.authors[:3])
        if len(p.authors) > 3:
            authors += f" (+{len(p.authors) - 3} more)"
        typer.echo(f"   Authors: {authors}")
        if p.url:
            typer.echo(f"   URL: {p.url}")
        typer.echo()


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Research query")],
    profile: ProfileOption = None,
    sources: SourceOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Maximum number of results"),
    ] = None,
    output_format: FormatOption = "text",
):
    """
    Search for academic papers.

    Examples:

        # Search every provider in the default profile
        paper-finder search "graph neural networks for molecules"

        # Search arXiv and PubMed only, as JSON
        paper-finder search "protein folding" -s arxiv -s pubmed --format json
    """
    _check_query(query)
    _check_format(output_format)
    config = _load_profile(profile, sources)
    asyncio.run(_search_async(query, config, limit, output_format))


async def _search_async(query: str, config: ProfileConfig, limit: int | None, output_format: str):
    """Async implementation of search."""
    try:
        agent = create_agent(config)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    async with agent:
        result = await agent.search(query)

    papers = result.papers[:limit] if limit is not None else result.papers

    if output_format == "json":
        typer.echo(json.dumps(
            {"searchTerms": result.search_terms, "papers": [p.to_dict() for p in papers]},
            indent=2,
        ))
    else:
        typer.echo(f"Search terms: {', '.join(result.search_terms)}\n")
        _echo_papers(papers)


@app.command()
def chat(
    query: Annotated[str, typer.Argument(help="Research question")],
    profile: ProfileOption = None,
    sources: SourceOption = None,
    output_format: FormatOption = "text",
):
    """Search for papers and summarize the research landscape."""
    _check_query(query)
    _check_format(output_format)
    config = _load_profile(profile, sources)
    asyncio.run(_chat_async(query, config, output_format))


async def _chat_async(query: str, config: ProfileConfig, output_format: str):
    """Async implementation of chat."""
    try:
        agent = create_agent(config)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    async with agent:
        result = await agent.chat(query)

    if output_format == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(result.response)
        typer.echo()
        _echo_papers(result.papers)


@app.command()
def terms(
    query: Annotated[str, typer.Argument(help="Research query")],
    profile: ProfileOption = None,
):
    """Show the search terms generated for a query."""
    config = _load_profile(profile)
    asyncio.run(_terms_async(query, config))


async def _terms_async(query: str, config: ProfileConfig):
    """Async implementation of terms."""
    try:
        llm = create_llm_provider(config.llm)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    generator = create_term_generator(config, llm)
    if llm is None:
        generated = await generator.generate_terms(query)
    else:
        async with llm:
            generated = await generator.generate_terms(query)

    for term in generated:
        typer.echo(term)


@app.command()
def health(
    profile: ProfileOption = None,
    sources: SourceOption = None,
    output_format: FormatOption = "text",
):
    """Check that every configured provider answers. Exits 1 when degraded."""
    _check_format(output_format)
    config = _load_profile(profile, sources)
    asyncio.run(_health_async(config, output_format))


async def _health_async(config: ProfileConfig, output_format: str):
    """Async implementation of health."""
    try:
        agent = create_agent(config)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    async with agent:
        report = await agent.health()

    if output_format == "json":
        typer.echo(json.dumps(report.model_dump(), indent=2))
    else:
        typer.echo(f"Status: {report.status} ({report.timestamp})")
        for name, ok in report.providers.items():
            typer.echo(f"  {name}: {'ok' if ok else 'FAILED'}")

    if report.status != "healthy":
        raise typer.Exit(1)


@app.command()
def profiles():
    """List available configuration profiles."""
    config_file = load_profiles(DEFAULT_CONFIG_PATH)

    typer.echo("Available profiles:\n")
    for name, profile in config_file.profiles.items():
        typer.echo(f"  {name}")
        typer.echo(f"    LLM: {profile.llm.backend}")
        typer.echo(f"    Sources: {', '.join(profile.paper_sources.providers)}")
        typer.echo()


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
