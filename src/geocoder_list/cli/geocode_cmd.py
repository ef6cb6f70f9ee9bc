"""Geocoding CLI commands: resolve locations and inspect configured backends."""

import asyncio

import typer

geocode_app = typer.Typer()


@geocode_app.command("resolve")
def resolve(
    queries: list[str] = typer.Argument(..., help="Location strings to geocode"),  # noqa: B008
    all_results: bool = typer.Option(False, "--all", help="Return every candidate from the winning backend"),  # noqa: FBT001
    show_log: bool = typer.Option(False, "--log", help="Include the attempt log in the output"),  # noqa: FBT001
) -> None:
    """Geocode one or more locations and print canonical JSON."""
    found = asyncio.run(_resolve(queries, all_results, show_log))
    if not found:
        raise typer.Exit(code=1)


@geocode_app.command("providers")
def providers() -> None:
    """List configured backends in fallback order."""
    from geocoder_list.core.config import get_settings
    from geocoder_list.lib.geocoder import Conditional, build_geocoder_list

    geocoders = build_geocoder_list(get_settings())
    if not len(geocoders.registry):
        typer.echo("No geocoder backends are enabled and configured.")
        return

    for position, entry in enumerate(geocoders.registry, start=1):
        route = f"  (only for /{entry.predicate}/)" if isinstance(entry, Conditional) else ""
        typer.echo(f"{position}. {entry.backend.provider_name}{route}")


async def _resolve(queries: list[str], all_results: bool, show_log: bool) -> bool:
    """Async implementation of resolve. Returns True if every query resolved."""
    from geocoder_list.core.config import get_settings
    from geocoder_list.lib.geocoder import build_geocoder_list, normalize_query
    from geocoder_list.schemas.geocoding import (
        AttemptRecordResponse,
        CanonicalResultResponse,
        ResolveResponse,
    )

    geocoders = build_geocoder_list(get_settings())
    every_query_found = True

    for query in queries:
        geocoders.flush()
        if all_results:
            results = await geocoders.resolve_all(query)
        else:
            single = await geocoders.resolve_one(query)
            results = [single] if single is not None else []

        if not results:
            every_query_found = False
            if geocoders.last_error:
                typer.echo(f"No result for {query!r}; last backend error: {geocoders.last_error}", err=True)

        response = ResolveResponse(
            query=normalize_query(query),
            results=[CanonicalResultResponse.from_result(r) for r in results],
            attempts=[AttemptRecordResponse.from_record(r) for r in geocoders.log()] if show_log else [],
        )
        typer.echo(response.model_dump_json(indent=2, exclude_none=True))

    return every_query_found
