"""CLI interface for searching characters and managing favorites."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from .config import AppSettings, get_settings
from .controller import StateController
from .exceptions import CatalogError
from .models import CharacterSummary, ToggleOutcome
from .observability import setup_structured_logging

app = typer.Typer(help="Search the Rick and Morty character catalog and keep up to 4 favorites")

T = TypeVar("T")


def build_controller(settings: AppSettings, on_capacity_reached: Callable[[str], None]) -> StateController:
    """Create the controller used by every command."""
    return StateController.from_settings(settings, on_capacity_reached=on_capacity_reached)


def _notice(message: str) -> None:
    print(f"! {message}")


def _run(action: Callable[[StateController], Awaitable[T]]) -> T:
    settings = get_settings()
    setup_structured_logging(settings.logging.level, json_output=settings.logging.json_output)

    async def _main() -> T:
        async with build_controller(settings, _notice) as controller:
            return await action(controller)

    return asyncio.run(_main())


def _parse_id(raw: str) -> int | str:
    return int(raw) if raw.isdigit() else raw


def _format_row(character: CharacterSummary, favorite: bool) -> str:
    star = "*" if favorite else " "
    return f"{star} {character.id:>4}  {character.name}  ({character.status}, {character.species})"


@app.command()
def search(name: str = typer.Argument(..., help="Character name or fragment")) -> None:
    """Search characters by name."""
    if not name.strip():
        raise typer.BadParameter("Enter a character name to search for", param_hint="NAME")

    async def _search(controller: StateController) -> None:
        controller.set_search_term(name)
        await controller.wait_for_search()

        if controller.error:
            print(controller.error)
            raise typer.Exit(code=1)
        if not controller.results:
            print(f'No characters found for "{name}".')
            return
        for character in controller.results:
            print(_format_row(character, controller.is_favorite(character.id)))

    _run(_search)


@app.command()
def favorites() -> None:
    """List favorite characters."""

    async def _favorites(controller: StateController) -> None:
        view = await controller.refresh_favorites()
        print(f"Your Favorite Characters ({len(view.ids)}/{controller.favorites_capacity})")

        if view.error:
            print(view.error)
            raise typer.Exit(code=1)
        if view.is_empty:
            print("You haven't added any characters to your favorites yet.")
            return
        for character in view.results:
            print(_format_row(character, True))

    _run(_favorites)


@app.command()
def toggle(character_id: str = typer.Argument(..., help="Character id to add or remove")) -> None:
    """Add a character to favorites, or remove it if already there."""

    async def _toggle(controller: StateController) -> ToggleOutcome:
        return controller.toggle_favorite(_parse_id(character_id))

    outcome = _run(_toggle)
    if outcome is ToggleOutcome.ADDED:
        print(f"Added {character_id} to favorites")
    elif outcome is ToggleOutcome.REMOVED:
        print(f"Removed {character_id} from favorites")
    else:
        raise typer.Exit(code=1)


@app.command()
def show(character_id: str = typer.Argument(..., help="Character id")) -> None:
    """Show one character's details."""

    async def _show(controller: StateController) -> tuple[CharacterSummary, bool]:
        key = _parse_id(character_id)
        return await controller.get_character(key), controller.is_favorite(key)

    try:
        character, favorite = _run(_show)
    except CatalogError:
        print("Failed to load character details. Character might not exist.")
        raise typer.Exit(code=1)

    print(character.name + (" (favorite)" if favorite else ""))
    print(f"Status: {character.status}")
    print(f"Species: {character.species}")
    if character.type:
        print(f"Type: {character.type}")
    print(f"Gender: {character.gender}")
    print(f"Origin: {character.origin.name}")
    print(f"Last Known Location: {character.location.name}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()
    print(f"Catalog URL: {settings.catalog.base_url}")
    print(f"Timeout: {settings.catalog.timeout}s")
    print(f"Debounce: {settings.search.debounce_ms}ms")
    print(f"Favorites capacity: {settings.favorites.capacity}")
    print(f"Storage: {settings.get_storage_path()}")
    print(f"Log level: {settings.logging.level}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
