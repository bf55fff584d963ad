"""
CLI commands for searching and annotating rule documents.
"""

import sys
import json
from pathlib import Path
from typing import Optional
import click
from loguru import logger

from ...config import settings
from ...engine import RulesEngine
from ...exceptions import DocumentLoadError
from ...search.suggestions import format_result_type


def load_engine(data_dir: Optional[str]) -> RulesEngine:
    """Load documents and build the engine, exiting on load errors."""
    try:
        return RulesEngine.from_directory(Path(data_dir) if data_dir else settings.data_dir)
    except DocumentLoadError as e:
        logger.error(f"Failed to load rules: {e}")
        sys.exit(1)


data_dir_option = click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory containing rules-database.json",
)


@click.group(name="rules")
def rules_commands():
    """Rule search and cross-reference commands."""
    pass


@rules_commands.command(name="search")
@click.argument("query")
@data_dir_option
@click.option("--pages", is_flag=True, help="Include page navigation results")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def search_rules(query: str, data_dir: Optional[str], pages: bool, as_json: bool):
    """Search rule documents for QUERY."""
    engine = load_engine(data_dir)
    results = engine.search_with_navigation(query) if pages else engine.search(query)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        click.echo(f'No results found for "{query}"')
        return

    for rank, result in enumerate(results, 1):
        click.echo(
            f"{rank:>2}. [{format_result_type(result.type)}] {result.title} "
            f"({result.path}) score={result.relevance_score}"
        )
        if result.description:
            click.echo(f"    {result.description}")


@rules_commands.command(name="annotate")
@click.argument("text")
@data_dir_option
@click.option("--links", is_flag=True, help="Also link plain words that name a rule")
def annotate_text(text: str, data_dir: Optional[str], links: bool):
    """Annotate TEXT and print its spans as JSON."""
    engine = load_engine(data_dir)
    spans = engine.annotate(text, references_only=not links)
    click.echo(json.dumps([s.to_dict() for s in spans], indent=2))


@rules_commands.command(name="suggest")
@click.argument("query")
@data_dir_option
def suggest_keywords(query: str, data_dir: Optional[str]):
    """Print autocomplete suggestions for QUERY."""
    engine = load_engine(data_dir)
    for suggestion in engine.suggest(query):
        click.echo(suggestion)


@rules_commands.command(name="sources")
@data_dir_option
@click.option("--uncategorized", is_flag=True, help="Only list reference ids no section cites")
def list_sources(data_dir: Optional[str], uncategorized: bool):
    """List cited names and the sections that cite them."""
    engine = load_engine(data_dir)

    if uncategorized:
        for ref_id in engine.get_uncategorized_rules():
            click.echo(ref_id)
        return

    for name, locations in engine.get_source_map().items():
        click.echo(name)
        for location in locations:
            click.echo(f"    {location.section_title} ({location.path})")
